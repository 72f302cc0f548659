# backend/svcdot/compiler/normalize.py
"""
Registry instance -> graph node and dependency edges.

One call handles one instance completely: it reads the restarter and the
dependency groups, decides whether the instance folds into a
consolidation bucket, and otherwise returns the node with all of its
outgoing edges so they can be written together.
"""

import logging
import re
from typing import List, Optional, Union

from svcdot.compiler.consolidate import (
    RESTARTER_PORT,
    RPCBIND_PORT,
    ConsolidationBuckets,
    ConsolidationKind,
    classify,
    is_inetd_restarter,
)
from svcdot.compiler.types import Edge, InstanceGraph, Node
from svcdot.errors import ExpectedAbsence, FmriParseError, NotFoundError, RegistryFault
from svcdot.registry.base import (
    PROP_ENABLED,
    PROP_ENTITIES,
    PROP_GROUPING,
    PROP_RESTARTER,
    STRING_TYPES,
    Instance,
    PropertyGroup,
    Registry,
    Snapshot,
)
from svcdot.registry.fmri import strip_scheme
from svcdot.schemas import GraphOptions
from svcdot.visual.edge_rules import EdgeStyle, edge_style, edge_weight, is_omitted_net_dep
from svcdot.visual.visual_style import category_for

logger = logging.getLogger(__name__)


def dot_id(text: str) -> str:
    """
    Convert a property group name into a dot record port id.
    Deterministic; `-` and anything else outside [A-Za-z0-9_] becomes `_`.
    """
    return re.sub(r"[^a-zA-Z0-9_]", "_", text)


# ============================================================
# Registry lookups
# ============================================================

def is_enabled(registry: Registry, instance: Instance) -> bool:
    """general/enabled of the instance itself; anything unusable reads as disabled."""
    try:
        prop = registry.general_property(instance, PROP_ENABLED, composed=False)
        value = prop.single()
    except ExpectedAbsence:
        return False

    if prop.type != "boolean":
        return False
    return bool(value)


def instance_restarter(registry: Registry, instance: Instance) -> str:
    """The composed restarter FMRI, or "" for the default restarter."""
    try:
        prop = registry.general_property(instance, PROP_RESTARTER)
        value = prop.single()
    except ExpectedAbsence:
        return ""

    if prop.type not in STRING_TYPES or not isinstance(value, str):
        return ""
    return value


def running_snapshot(registry: Registry, instance: Instance) -> Optional[Snapshot]:
    try:
        return registry.running_snapshot(instance)
    except NotFoundError:
        return None


def dependency_groups(
    registry: Registry, instance: Instance, snapshot: Optional[Snapshot]
) -> List[PropertyGroup]:
    """Dependency groups that declare entities; the rest are incomplete and ignored."""
    groups = []
    for pg in registry.dependency_groups(instance, snapshot):
        try:
            registry.group_property(pg, PROP_ENTITIES)
        except NotFoundError:
            logger.debug(f"{instance.fmri}: dependency group '{pg.name}' has no entities")
            continue
        groups.append(pg)
    return groups


# ============================================================
# Edges
# ============================================================

def _group_strings(registry: Registry, fmri: str, pg: PropertyGroup, name: str) -> List[str]:
    try:
        return registry.string_values(registry.group_property(pg, name))
    except ExpectedAbsence as e:
        raise RegistryFault(f"read {fmri} dependency '{pg.name}'", str(e)) from e


def _grouping(registry: Registry, fmri: str, pg: PropertyGroup) -> str:
    values = _group_strings(registry, fmri, pg, PROP_GROUPING)
    if len(values) != 1:
        raise RegistryFault(
            f"read {fmri} dependency '{pg.name}'",
            f"grouping has {len(values)} values",
        )
    return values[0]


def _make_edge(
    source: str, port: str, target: str, grouping: str, style: EdgeStyle, weight: int
) -> Edge:
    return Edge(
        source=source,
        target=target,
        port=port,
        grouping=grouping,
        weight=weight,
        attributes=list(style.attributes),
    )


def group_edges(
    registry: Registry,
    fmri: str,
    enabled: bool,
    pg: PropertyGroup,
    options: GraphOptions,
) -> List[Edge]:
    """Edges for one dependency group; unusable entities are dropped one by one."""
    port = dot_id(pg.name)
    grouping = _grouping(registry, fmri, pg)
    style = edge_style(grouping)

    edges: List[Edge] = []
    for entity in _group_strings(registry, fmri, pg, PROP_ENTITIES):
        # file: dependencies and other non-service entities are not drawn
        try:
            parts = registry.parse_fmri(entity)
        except FmriParseError:
            logger.debug(f"{fmri}: skipping non-service dependency {entity}")
            continue

        try:
            resolved = registry.resolve_fmri(entity)
        except (NotFoundError, FmriParseError):
            logger.debug(f"{fmri}: skipping dependency on missing {entity}")
            continue

        if options.omit_net_deps and is_omitted_net_dep(fmri, parts.service):
            logger.debug(f"{fmri}: omitting network dependency {entity}")
            continue

        if resolved.instance is None:
            # A service dependency is drawn to every instance of the service.
            for target in registry.instances(resolved.service):
                target_enabled = enabled and is_enabled(registry, target)
                edges.append(_make_edge(
                    fmri, port, registry.instance_to_fmri(target), grouping,
                    style, edge_weight(style, enabled, target_enabled),
                ))
        else:
            target = resolved.instance
            target_enabled = enabled and is_enabled(registry, target)
            edges.append(_make_edge(
                fmri, port, registry.instance_to_fmri(target), grouping,
                style, edge_weight(style, enabled, target_enabled),
            ))

    return edges


# ============================================================
# Node
# ============================================================

def build_instance_node(
    registry: Registry,
    instance: Instance,
    options: GraphOptions,
    buckets: ConsolidationBuckets,
) -> Union[InstanceGraph, ConsolidationKind]:
    """
    Build the node and edges for one instance.

    Returns the ConsolidationKind of the bucket the instance went into
    instead when a consolidation option swallows it; nothing else is
    emitted for it in that case.
    """
    fmri = registry.instance_to_fmri(instance)
    label = strip_scheme(fmri)

    restarter = instance_restarter(registry, instance)
    snapshot = running_snapshot(registry, instance)
    groups = dependency_groups(registry, instance, snapshot)

    # the restarter counts as a dependency group of its own
    group_count = len(groups) + (1 if restarter else 0)

    kind = classify(
        service_name=instance.service,
        inetd_client=bool(restarter) and is_inetd_restarter(restarter),
        group_count=group_count,
        has_non_rpcbind_dep=any(pg.name != RPCBIND_PORT for pg in groups),
        consolidate_inetd=options.consolidate_inetd_svcs,
        consolidate_rpcbind=options.consolidate_rpcbind_svcs,
    )
    if kind is not ConsolidationKind.NONE:
        buckets.add(kind, label)
        return kind

    enabled = is_enabled(registry, instance)
    node = Node(id=fmri, label=label, enabled=enabled, category=category_for(fmri))

    edges: List[Edge] = []
    if restarter:
        node.add_port(RESTARTER_PORT)
        edges.append(Edge(source=fmri, target=restarter, port=RESTARTER_PORT, restarter=True))

    for pg in groups:
        if not node.add_port(dot_id(pg.name)):
            logger.debug(f"{fmri}: dependency group '{pg.name}' shares port {dot_id(pg.name)}")
        edges.extend(group_edges(registry, fmri, enabled, pg, options))

    return InstanceGraph(node=node, edges=edges)
