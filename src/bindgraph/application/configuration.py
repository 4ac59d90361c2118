"""Application layer - Configuration builder and immutable configuration."""

import logging
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bindgraph.application.class_hierarchy import ClassHierarchy
from bindgraph.domain import ClassNode, ConflictError, NamedParameterNode, Node

logger = logging.getLogger(__name__)

NodeRef = Union[Node, str]


def _name_of(node: NodeRef) -> str:
    return node.full_name if isinstance(node, Node) else node


class Configuration(BaseModel):
    """Immutable set of bindings layered over a class hierarchy.

    Safe to share read-only between threads, injectors and exporters.

    Attributes:
        class_hierarchy: The hierarchy the bindings refer to.
        implementations: Interface name to bound implementation name.
        parameter_literals: Named parameter name to the literal it was bound with.
        parameter_values: Named parameter name to the parsed bound value.
        singleton_names: Names of class nodes marked singleton.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    class_hierarchy: ClassHierarchy = Field(..., description="Hierarchy the bindings refer to.")
    implementations: Mapping[str, str] = Field(default_factory=dict)
    parameter_literals: Mapping[str, Any] = Field(default_factory=dict)
    parameter_values: Mapping[str, Any] = Field(default_factory=dict)
    singleton_names: FrozenSet[str] = Field(default_factory=frozenset)

    @field_validator("implementations", "parameter_literals", "parameter_values", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    def is_singleton(self, node: NodeRef) -> bool:
        return _name_of(node) in self.singleton_names

    def get_bound_implementation(self, node: NodeRef) -> Optional[ClassNode]:
        """Return the implementation explicitly bound to a class node, if any."""
        bound = self.implementations.get(_name_of(node))
        if bound is None:
            return None
        return self.class_hierarchy.get_node(bound)

    def get_bound_parameter_value(self, parameter: NodeRef) -> Optional[Any]:
        """Return the parsed value bound to a named parameter, if any.

        None means the resolver falls back to the parameter's declared default.
        """
        return self.parameter_values.get(_name_of(parameter))

    def get_bound_parameter_literal(self, parameter: NodeRef) -> Optional[Any]:
        """Return the literal a named parameter was bound with, if any."""
        return self.parameter_literals.get(_name_of(parameter))

    def is_parameter_bound(self, parameter: NodeRef) -> bool:
        return _name_of(parameter) in self.parameter_values

    def bound_implementations(self) -> List[Tuple[ClassNode, ClassNode]]:
        """All implementation bindings as node pairs, sorted by interface name."""
        hierarchy = self.class_hierarchy
        return [
            (hierarchy.get_node(name), hierarchy.get_node(self.implementations[name]))
            for name in sorted(self.implementations)
        ]

    def bound_parameters(self) -> List[Tuple[NamedParameterNode, Any]]:
        """All parameter bindings as (node, literal) pairs, sorted by parameter name."""
        hierarchy = self.class_hierarchy
        return [(hierarchy.get_node(name), self.parameter_literals[name]) for name in sorted(self.parameter_literals)]

    def singletons(self) -> List[ClassNode]:
        """Class nodes marked singleton, sorted by name."""
        return [self.class_hierarchy.get_node(name) for name in sorted(self.singleton_names)]

    def to_builder(self) -> "ConfigurationBuilder":
        """Return a new builder pre-populated with this configuration's bindings."""
        builder = ConfigurationBuilder(self.class_hierarchy)
        builder.add_configuration(self)
        return builder


class ConfigurationBuilder:
    """Accumulates bindings and freezes them into a ``Configuration``.

    Every bind call is validated immediately; ``build`` performs no further
    checks. Implementation bindings are bind-once while parameter bindings may
    be overwritten by a later explicit bind.

    The builder is not thread-safe. Callers must serialize bind calls and call
    ``build`` once construction is complete.

    Attributes:
        _class_hierarchy: Hierarchy that bind targets are looked up in.
        _implementations: Interface name to implementation name.
        _parameter_literals: Parameter name to bound literal.
        _parameter_values: Parameter name to parsed value.
        _singletons: Names of singleton class nodes.
    """

    def __init__(self, class_hierarchy: ClassHierarchy) -> None:
        self._class_hierarchy = class_hierarchy
        self._implementations: Dict[str, str] = {}
        self._parameter_literals: Dict[str, Any] = {}
        self._parameter_values: Dict[str, Any] = {}
        self._singletons: Set[str] = set()

    @property
    def class_hierarchy(self) -> ClassHierarchy:
        return self._class_hierarchy

    def _class_node(self, node: NodeRef) -> ClassNode:
        found = self._class_hierarchy.lookup(node)
        if not isinstance(found, ClassNode):
            raise ConflictError(f"'{found.full_name}' is a {found.kind.value}, not a class")
        return found

    def bind_implementation(self, interface: NodeRef, implementation: NodeRef) -> "ConfigurationBuilder":
        """Bind an interface to the concrete implementation the injector should build.

        Args:
            interface: Class node (or its name) being bound.
            implementation: One of the interface's known implementations.

        Returns:
            The builder, for chaining.

        Raises:
            ConflictError: If the interface is already bound to a different
                implementation, or the implementation is not known to satisfy it.
            NotFoundError: If either name is unknown.

        Example:
            >>> builder.bind_implementation("shapes.Shape", "shapes.Circle")
        """
        interface_node = self._class_node(interface)
        impl_node = self._class_node(implementation)

        if impl_node is not interface_node and impl_node.full_name not in interface_node.known_implementation_names:
            raise ConflictError(
                f"'{impl_node.full_name}' is not a known implementation of '{interface_node.full_name}'"
            )

        existing = self._implementations.get(interface_node.full_name)
        if existing is not None and existing != impl_node.full_name:
            raise ConflictError(
                f"'{interface_node.full_name}' is already bound to '{existing}', "
                f"cannot rebind to '{impl_node.full_name}'"
            )

        self._implementations[interface_node.full_name] = impl_node.full_name
        logger.debug("Bound %s to %s", interface_node.full_name, impl_node.full_name)
        return self

    def bind_parameter(self, parameter: NodeRef, value: Any) -> "ConfigurationBuilder":
        """Bind a named parameter to a literal value, replacing any earlier binding.

        Raises:
            ParameterTypeError: If the value cannot be parsed as the declared type.
            ConflictError: If the node is not a named parameter.
        """
        node = self._class_hierarchy.lookup(parameter)
        if not isinstance(node, NamedParameterNode):
            raise ConflictError(f"'{node.full_name}' is a {node.kind.value}, not a named parameter")

        parsed = self._class_hierarchy.parse_value(node, value)
        if node.full_name in self._parameter_values:
            logger.debug(
                "Rebinding named parameter %s from %r to %r",
                node.full_name,
                self._parameter_literals[node.full_name],
                value,
            )
        self._parameter_literals[node.full_name] = value
        self._parameter_values[node.full_name] = parsed
        return self

    def mark_singleton(self, node: NodeRef) -> "ConfigurationBuilder":
        """Mark a class node as singleton for every injector built on this configuration.

        Raises:
            ConflictError: If the class is not singleton-eligible.
        """
        class_node = self._class_node(node)
        if not class_node.singleton_eligible:
            raise ConflictError(f"'{class_node.full_name}' is not eligible for singleton scope")
        self._singletons.add(class_node.full_name)
        return self

    def add_configuration(self, configuration: Configuration) -> "ConfigurationBuilder":
        """Replay another configuration's bindings through this builder's checks.

        Raises:
            ConflictError: If an implementation binding contradicts an existing one.
        """
        for interface, implementation in configuration.implementations.items():
            self.bind_implementation(interface, implementation)
        for parameter, literal in configuration.parameter_literals.items():
            self.bind_parameter(parameter, literal)
        for name in configuration.singleton_names:
            self.mark_singleton(name)
        return self

    def build(self) -> Configuration:
        """Freeze the accumulated bindings."""
        configuration = Configuration(
            class_hierarchy=self._class_hierarchy,
            implementations=self._implementations,
            parameter_literals=self._parameter_literals,
            parameter_values=self._parameter_values,
            singleton_names=frozenset(self._singletons),
        )
        logger.debug(
            "Built configuration with %d implementation, %d parameter and %d singleton bindings",
            len(self._implementations),
            len(self._parameter_values),
            len(self._singletons),
        )
        return configuration
