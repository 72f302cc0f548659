"""svcdot: render the SMF service dependency graph as a Graphviz dot file."""

__version__ = "0.1.0"
