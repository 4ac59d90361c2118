"""
Domain layer - Declaration nodes, descriptors and errors.

This layer contains the fundamental models of the configuration engine.
It has no dependencies on other layers.
"""

from .enums import DependencyKind, NodeKind
from .exceptions import (
    AmbiguousBindingError,
    BindGraphException,
    ConflictError,
    ConstructionError,
    CyclicDependencyError,
    HierarchyError,
    MissingParameterError,
    NoImplementationError,
    NotFoundError,
    ParameterTypeError,
    ResolutionError,
)
from .interfaces import IClassHierarchy, IInjector, ILifetimeManager, INodeVisitor
from .models import (
    ClassNode,
    ConstructorArg,
    NamedParameterNode,
    Node,
    PackageNode,
    TypeDescriptor,
    split_name,
)

# Rebuild Pydantic models to resolve the recursive ``children`` reference
Node.model_rebuild()
PackageNode.model_rebuild()
ClassNode.model_rebuild()
NamedParameterNode.model_rebuild()

__all__ = [
    # Enums
    "NodeKind",
    "DependencyKind",
    # Exceptions
    "BindGraphException",
    "HierarchyError",
    "NotFoundError",
    "ConflictError",
    "ParameterTypeError",
    "ResolutionError",
    "NoImplementationError",
    "AmbiguousBindingError",
    "MissingParameterError",
    "CyclicDependencyError",
    "ConstructionError",
    # Interfaces
    "IClassHierarchy",
    "IInjector",
    "ILifetimeManager",
    "INodeVisitor",
    # Models
    "Node",
    "PackageNode",
    "ClassNode",
    "NamedParameterNode",
    "ConstructorArg",
    "TypeDescriptor",
    "split_name",
]
