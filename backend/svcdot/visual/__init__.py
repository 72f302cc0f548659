# Coloring and edge styling rules
# Pure lookup tables, no registry access

from svcdot.visual.visual_style import CATEGORY_COLORS, category_for, color_for
from svcdot.visual.edge_rules import EdgeStyle, edge_style, edge_weight, is_omitted_net_dep

__all__ = [
    "CATEGORY_COLORS",
    "EdgeStyle",
    "category_for",
    "color_for",
    "edge_style",
    "edge_weight",
    "is_omitted_net_dep",
]
