#backend\svcdot\compiler\compiler.py

import io
import logging
from typing import Optional, TextIO

from svcdot.compiler.consolidate import ConsolidationBuckets
from svcdot.compiler.normalize import build_instance_node
from svcdot.compiler.render_dot import DotWriter, HeaderInfo
from svcdot.compiler.types import Edge, InstanceGraph, Node, Port
from svcdot.registry.base import Registry
from svcdot.registry.fmri import strip_scheme
from svcdot.schemas import GraphOptions
from svcdot.visual.visual_style import category_for

logger = logging.getLogger(__name__)

# Otherwise the master restarter shows up as an unconnected node.
SKIPPED_SERVICES = {"system/svc/restarter"}


# ============================================================
# Service graph
# ============================================================

def compile_graph(
    registry: Registry,
    options: GraphOptions,
    out: TextIO,
    header: Optional[HeaderInfo] = None,
) -> DotWriter:
    """
    Walk every instance in the registry and write the dependency graph.

    Nodes and edges go out one instance at a time; consolidated instances
    are written as bucket nodes after the walk. A RegistryFault aborts
    the walk, leaving whatever was already written.
    """
    writer = DotWriter(out)
    writer.write_header(header or HeaderInfo.current(), options.size, options.legend_file)

    buckets = ConsolidationBuckets()

    for service in registry.services():
        if service.name in SKIPPED_SERVICES:
            continue

        for instance in registry.instances(service):
            result = build_instance_node(registry, instance, options, buckets)
            if isinstance(result, InstanceGraph):
                writer.write_instance(result)

    for bucket in buckets.flush():
        writer.write_instance(bucket)

    writer.write_footer()

    logger.info(
        f"Wrote {writer.node_count} nodes and {writer.edge_count} edges "
        f"({buckets.count()} instances consolidated)"
    )
    return writer


def render_graph(
    registry: Registry,
    options: Optional[GraphOptions] = None,
    header: Optional[HeaderInfo] = None,
) -> str:
    buf = io.StringIO()
    compile_graph(registry, options or GraphOptions(), buf, header)
    return buf.getvalue()


# ============================================================
# Legend
# ============================================================

# (category path, dependency grouping, edge attributes, weight)
LEGEND_SAMPLES = [
    ("system", "require_all", ("style=bold",), 10),
    ("network", "require_any", (), 1),
    ("milestone", "optional_all", ("style=dashed",), 1),
    ("other", "exclude_all", ("arrowtail=odot",), 1),
]


def _legend_node(fmri: str, enabled: bool) -> Node:
    node = Node(
        id=fmri,
        label=strip_scheme(fmri),
        enabled=enabled,
        category=category_for(fmri),
    )
    if not enabled:
        node.ports.append(Port(id="dg", label="dependency_group"))
    return node


def write_legend(out: TextIO) -> DotWriter:
    """
    A disabled/enabled pair of sample services per color category, each
    pair joined by one of the dependency groupings.
    """
    writer = DotWriter(out)
    writer.write_legend_header()

    for category, grouping, attributes, weight in LEGEND_SAMPLES:
        disabled = f"svc:/{category}/disabled:default"
        enabled = f"svc:/{category}/enabled:default"

        writer.write_node(_legend_node(disabled, enabled=False))
        writer.write_node(_legend_node(enabled, enabled=True))
        writer.write_edge(Edge(
            source=disabled,
            target=enabled,
            port="dg",
            grouping=grouping,
            weight=weight,
            attributes=[f'label="{grouping}"', *attributes],
        ))

    writer.write_legend_footer()
    return writer


def render_legend() -> str:
    buf = io.StringIO()
    write_legend(buf)
    return buf.getvalue()
