"""
Registration module.

Produces type descriptors from Python classes and their constructor type hints.
"""

from .registry import Parameter, TypeRegistry

__all__ = [
    "Parameter",
    "TypeRegistry",
]
