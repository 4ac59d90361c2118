"""
Infrastructure layer - Adapters and integrations.

This layer contains registration from Python classes, Graphviz export,
and integrations with external frameworks and tools.
It depends on both Application and Domain layers.
"""

from . import graphviz, registration, testing

__all__ = [
    "graphviz",
    "registration",
    "testing",
]
