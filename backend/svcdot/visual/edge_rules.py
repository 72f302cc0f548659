"""
Edge styling and suppression rules for dependency edges.
"""

from dataclasses import dataclass
from typing import FrozenSet, Tuple

from svcdot.compiler.types import Grouping


@dataclass(frozen=True)
class EdgeStyle:
    weight: int = 1
    attributes: Tuple[str, ...] = ()


# Bonus for edges whose source and target are both enabled, so dot draws
# the live part of the graph straighter.
ENABLED_PAIR_BONUS = 2

GROUPING_STYLES = {
    Grouping.OPTIONAL_ALL.value: EdgeStyle(weight=1, attributes=("style=dashed",)),
    Grouping.EXCLUDE_ALL.value: EdgeStyle(weight=1, attributes=("arrowtail=odot",)),
    Grouping.REQUIRE_ALL.value: EdgeStyle(weight=3, attributes=("style=bold",)),
    Grouping.REQUIRE_ANY.value: EdgeStyle(weight=2),
}

DEFAULT_STYLE = EdgeStyle()

# Nearly everything depends on these; omit_net_deps drops those edges.
NET_SERVICES: FrozenSet[str] = frozenset({
    "network/loopback",
    "network/physical",
})

# Sources whose network edges survive omit_net_deps. Without them the
# network services would be left with no dependents at all.
NET_DEP_ALLOWED_SOURCES: FrozenSet[str] = frozenset({
    "svc:/system/identity:node",
    "svc:/system/identity:domain",
    "svc:/network/initial:default",
    "svc:/milestone/single-user:default",
    "svc:/network/inetd:default",
    "svc:/network/http:apache2",
})


def edge_style(grouping: str) -> EdgeStyle:
    return GROUPING_STYLES.get(grouping, DEFAULT_STYLE)


def edge_weight(style: EdgeStyle, source_enabled: bool, target_enabled: bool) -> int:
    if source_enabled and target_enabled:
        return style.weight + ENABLED_PAIR_BONUS
    return style.weight


def is_omitted_net_dep(source_fmri: str, target_service: str) -> bool:
    """True when omit_net_deps should drop the edge source -> target_service."""
    return target_service in NET_SERVICES and source_fmri not in NET_DEP_ALLOWED_SOURCES
