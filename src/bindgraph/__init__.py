"""
bindgraph: Declarative configuration and dependency-resolution engine.

Public API exports for the bindgraph package.
"""

# Application exports
from bindgraph.application.class_hierarchy import ClassHierarchy, HierarchyCache
from bindgraph.application.configuration import Configuration, ConfigurationBuilder
from bindgraph.application.injector import Injector
from bindgraph.application.walk import CallbackVisitor, preorder

# Domain exports
from bindgraph.domain.enums import DependencyKind, NodeKind
from bindgraph.domain.exceptions import (
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
from bindgraph.domain.interfaces import INodeVisitor
from bindgraph.domain.models import (
    ClassNode,
    ConstructorArg,
    NamedParameterNode,
    Node,
    PackageNode,
    TypeDescriptor,
)

# Infrastructure exports
from bindgraph.infrastructure.graphviz import get_graphviz_string
from bindgraph.infrastructure.registration import Parameter, TypeRegistry

__version__ = "0.1.0"

__all__ = [
    # Hierarchy
    "ClassHierarchy",
    "HierarchyCache",
    # Configuration
    "Configuration",
    "ConfigurationBuilder",
    # Resolution
    "Injector",
    # Traversal and export
    "INodeVisitor",
    "CallbackVisitor",
    "preorder",
    "get_graphviz_string",
    # Registration
    "TypeRegistry",
    "Parameter",
    # Models
    "Node",
    "PackageNode",
    "ClassNode",
    "NamedParameterNode",
    "ConstructorArg",
    "TypeDescriptor",
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
]
