from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Union

from bindgraph.domain.models import ClassNode, NamedParameterNode, Node, PackageNode


class IClassHierarchy(ABC):
    """Abstract interface for querying declaration nodes."""

    @abstractmethod
    def get_node(self, name: str) -> Node:
        """Return the node with the given fully-qualified name.

        Raises:
            NotFoundError: If no such node exists.
        """

    @abstractmethod
    def get_namespace(self) -> PackageNode:
        """Return the namespace root shared by all nodes."""

    @abstractmethod
    def get_known_implementations(self, node: ClassNode) -> List[ClassNode]:
        """Return the known implementations of a class node, sorted by name."""

    @abstractmethod
    def parse_value(self, parameter: NamedParameterNode, literal: Any) -> Any:
        """Parse a literal as the declared type of a named parameter.

        Raises:
            ParameterTypeError: If the literal is not convertible.
        """


class IInjector(ABC):
    """Abstract interface for resolving instances from a configuration."""

    @abstractmethod
    def get_instance(self, target: Union[ClassNode, str]) -> Any:
        """Resolve a fully-constructed instance of the target class.

        Args:
            target: Class node or its fully-qualified name.
        """

    @abstractmethod
    def get_named_parameter(self, parameter: Union[NamedParameterNode, str]) -> Any:
        """Return the bound value of a named parameter, else its default."""


class ILifetimeManager(ABC):
    """Abstract interface for managing singleton instances."""

    @abstractmethod
    def get_or_create(self, key: str, factory: Callable[[], Any]) -> Any:
        """Get the cached instance for ``key`` or create and cache one.

        Args:
            key: Fully-qualified name of the singleton class node.
            factory: A callable to create a new instance if needed.
        """

    @abstractmethod
    def get_cached(self, key: str) -> Optional[Any]:
        """Return the cached instance for ``key``, if any."""

    @abstractmethod
    def clear_cache(self) -> None:
        """Clear any cached instances managed by this lifetime manager."""


class INodeVisitor(ABC):
    """Visitor over the declaration node variants and containment edges.

    Every method returns True to continue into the children of the visited
    node (or across the visited edge), False to skip them.
    """

    @abstractmethod
    def visit_package(self, node: PackageNode) -> bool:
        """Visit a package node."""

    @abstractmethod
    def visit_class(self, node: ClassNode) -> bool:
        """Visit a class node."""

    @abstractmethod
    def visit_named_parameter(self, node: NamedParameterNode) -> bool:
        """Visit a named parameter node."""

    @abstractmethod
    def visit_edge(self, parent: Node, child: Node) -> bool:
        """Visit the containment edge from ``parent`` to ``child``."""
