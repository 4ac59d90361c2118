"""
Graphviz export module.

Renders configurations as DOT documents for graph layout tools.
"""

from .exporter import GraphvizConfigVisitor, GraphvizOptions, get_graphviz_string

__all__ = [
    "GraphvizConfigVisitor",
    "GraphvizOptions",
    "get_graphviz_string",
]
