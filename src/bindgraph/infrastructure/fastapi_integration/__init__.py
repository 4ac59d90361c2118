"""
FastAPI integration module.

Provides helpers for resolving bindgraph instances inside FastAPI applications.
"""

from .integration import (
    InjectorMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
)

__all__ = [
    "create_fastapi_dependency",
    "create_request_dependency",
    "InjectorMiddleware",
]
