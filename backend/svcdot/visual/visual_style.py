"""
Node coloring by FMRI category and enabled state.

Services under system/ are orange, network/ blue, milestone/ green and
everything else light gray. Disabled services get the same hue at half
the saturation and a gray outline instead of black.
"""

from typing import Dict, List, Tuple

from svcdot.compiler.types import Category
from svcdot.registry.fmri import strip_scheme

ORANGE = "#ED9B4F"
BLUE = "#A3B8CB"
GREEN = "#C5D5A9"
GRAY = "#EDEFF2"

LTBLACK = "#808080"
LTORANGE = "#EDC39C"
LTBLUE = "#B7C1CB"
LTGREEN = "#CDD5C0"
LTGRAY = "#F0F1F2"

# Checked in order; the first matching prefix wins.
CATEGORY_PREFIXES: List[Tuple[str, Category]] = [
    ("system/", Category.SYSTEM),
    ("network/", Category.NETWORK),
    ("milestone/", Category.MILESTONE),
]

# category -> {enabled: (foreground, background)}
CATEGORY_COLORS: Dict[Category, Dict[bool, Tuple[str, str]]] = {
    Category.SYSTEM: {True: ("black", ORANGE), False: (LTBLACK, LTORANGE)},
    Category.NETWORK: {True: ("black", BLUE), False: (LTBLACK, LTBLUE)},
    Category.MILESTONE: {True: ("black", GREEN), False: (LTBLACK, LTGREEN)},
    Category.OTHER: {True: ("black", GRAY), False: (LTBLACK, LTGRAY)},
}


def category_for(fmri: str) -> Category:
    name = strip_scheme(fmri)
    for prefix, category in CATEGORY_PREFIXES:
        if name.startswith(prefix):
            return category
    return Category.OTHER


def category_colors(category: Category, enabled: bool) -> Tuple[str, str]:
    return CATEGORY_COLORS[category][bool(enabled)]


def color_for(fmri: str, enabled: bool) -> Tuple[str, str]:
    """Return (foreground, background) for a service FMRI."""
    return category_colors(category_for(fmri), enabled)
