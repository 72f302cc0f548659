# Graph model and dot output
#
# Entry points live in svcdot.compiler.compiler (render_graph, render_legend).
# They are not imported here: svcdot.visual imports the model types from
# this package.

from svcdot.compiler.types import Category, Edge, Grouping, InstanceGraph, Node, Port

__all__ = [
    "Category",
    "Edge",
    "Grouping",
    "InstanceGraph",
    "Node",
    "Port",
]
