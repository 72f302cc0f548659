# backend/svcdot/compiler/render_dot.py
"""
Graphviz dot writer.

Statements are written to the stream as soon as they are produced, one
instance at a time. dot accepts edges to nodes it has not seen yet, so
the graph never has to be held in memory.

Docs: https://graphviz.org/doc/info/lang.html
"""

import platform
import time
from dataclasses import dataclass
from typing import Iterable, Optional, TextIO

from svcdot.compiler.types import Edge, InstanceGraph, Node
from svcdot.visual.visual_style import category_colors

FONT_NAME = "Helvetica"
FONT_SIZE = 11

# Layout hints; the defaults were tuned for a wall-sized plot.
GRAPH_SETTINGS = (
    'ranksep="2";',
    "rankdir=LR;",
    "margin=1;",
)

# Characters with a meaning inside record labels
_RECORD_SPECIALS = "{}|<>"


@dataclass
class HeaderInfo:
    """Host and time shown as the graph label."""
    sysname: str
    version: str
    machine: str
    timestamp: str

    @classmethod
    def current(cls) -> "HeaderInfo":
        uname = platform.uname()
        return cls(
            sysname=uname.system,
            version=uname.version,
            machine=uname.machine,
            timestamp=time.strftime("%a %b %d %H:%M:%S %Z %Y"),
        )

    @property
    def label(self) -> str:
        return f"{self.sysname} {self.version} {self.machine}\\n{self.timestamp}"


def quote(text: str) -> str:
    return text.replace('"', '\\"')


def record_text(text: str) -> str:
    for ch in _RECORD_SPECIALS:
        text = text.replace(ch, "\\" + ch)
    return text


class DotWriter:
    """
    Writes dot statements for nodes and edges.
    No registry access; callers decide what to draw.
    """

    def __init__(self, out: TextIO):
        self.out = out
        self.node_count = 0
        self.edge_count = 0

    def _line(self, text: str = ""):
        self.out.write(text + "\n")

    # ---------- document ----------

    def write_header(
        self,
        info: HeaderInfo,
        size: Optional[str] = None,
        legend_file: Optional[str] = None,
    ):
        self._line("digraph scf {")
        self._line(f'label="{quote(info.label)}";')
        self._line(f'node [shape=box,fontname="{FONT_NAME}",fontsize={FONT_SIZE}];')
        if size is not None:
            self._line(f'size="{size}";')
        for setting in GRAPH_SETTINGS:
            self._line(setting)

        if legend_file is not None:
            # dot puts the epsf node on the top rank; the margin keeps it
            # clear of its neighbours
            self._line()
            self._line("/* legend */")
            self._line(f'legend [shape=epsf,shapefile="{quote(legend_file)}",label=""];')

        self._line()

    def write_footer(self):
        self._line("}")

    # ---------- statements ----------

    def write_node(self, node: Node):
        fg, bg = category_colors(node.category, node.enabled)

        attrs = []
        if node.ports:
            attrs.append("shape=record")
        attrs += [
            f'color="{fg}"',
            "style=filled",
            f'fillcolor="{bg}"',
            f'fontcolor="{fg}"',
        ]

        if node.ports:
            ports = "|".join(f"<{p.id}> {record_text(p.label)}" for p in node.ports)
            label = f"{{<foo> {record_text(node.label)} | {{{ports}}}}}"
        else:
            label = node.label
        attrs.append(f'label="{quote(label)}"')

        self._line(f'"{quote(node.id)}" [{",".join(attrs)}];')
        self.node_count += 1

    def write_edge(self, edge: Edge):
        source = f'"{quote(edge.source)}"'
        if edge.port:
            source += f":{edge.port}:e"

        statement = f'{source} -> "{quote(edge.target)}"'

        opts = list(edge.attributes)
        if edge.weight != 1:
            opts.append(f"weight={edge.weight}")
        if opts:
            statement += " [" + "".join(f"{opt}," for opt in opts) + "]"

        self._line(statement + ";")
        self.edge_count += 1

    def write_instance(self, graph: InstanceGraph):
        self.write_node(graph.node)
        self.write_edges(graph.edges)

    def write_edges(self, edges: Iterable[Edge]):
        for edge in edges:
            self.write_edge(edge)

    # ---------- legend ----------

    def write_legend_header(self):
        self._line("digraph legend {")
        self._line(f'node [shape=box,fontname="{FONT_NAME}",fontsize={FONT_SIZE}];')
        self._line(GRAPH_SETTINGS[0])
        self._line(GRAPH_SETTINGS[1])
        self._line()
        self._line("subgraph clusterlegend {")
        self._line('label="legend";')
        self._line('color="black";')
        self._line()

    def write_legend_footer(self):
        self._line("}")
        self._line("}")
