"""
Application layer - Hierarchy construction, configuration and resolution.

This layer orchestrates domain objects into the configuration engine.
It depends only on the Domain layer.
"""

from .circular_detector import CircularDependencyDetector
from .class_hierarchy import VALUE_TYPES, ClassHierarchy, HierarchyCache
from .configuration import Configuration, ConfigurationBuilder
from .injector import Injector
from .lifetime_manager import LifetimeManager
from .walk import CallbackVisitor, preorder, visit_node

__all__ = [
    "ClassHierarchy",
    "HierarchyCache",
    "VALUE_TYPES",
    "Configuration",
    "ConfigurationBuilder",
    "Injector",
    "LifetimeManager",
    "CircularDependencyDetector",
    "CallbackVisitor",
    "preorder",
    "visit_node",
]
