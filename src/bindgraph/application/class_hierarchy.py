"""Application layer - Class hierarchy construction and queries."""

import logging
import threading
from collections import defaultdict, deque
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Type, Union

from pydantic import TypeAdapter, ValidationError

from bindgraph.domain import (
    ClassNode,
    DependencyKind,
    HierarchyError,
    IClassHierarchy,
    NamedParameterNode,
    Node,
    NodeKind,
    NotFoundError,
    PackageNode,
    ParameterTypeError,
    TypeDescriptor,
    split_name,
)

logger = logging.getLogger(__name__)

VALUE_TYPES: Dict[str, Type] = {
    "String": str,
    "str": str,
    "Integer": int,
    "Long": int,
    "Short": int,
    "Byte": int,
    "int": int,
    "Float": float,
    "Double": float,
    "float": float,
    "Boolean": bool,
    "bool": bool,
}

_ADAPTERS: Dict[str, TypeAdapter] = {name: TypeAdapter(python_type) for name, python_type in VALUE_TYPES.items()}


class ClassHierarchy(IClassHierarchy):
    """Tree of declaration nodes built from type descriptors.

    The hierarchy is immutable once ``build`` returns and may be shared across
    threads without locking.

    Attributes:
        _namespace: The empty-named root package.
        _nodes: Every node keyed by fully-qualified name, root included.
    """

    def __init__(self) -> None:
        """Initialize an empty hierarchy holding only the namespace root."""
        self._namespace = PackageNode(full_name="", name="")
        self._nodes: Dict[str, Node] = {"": self._namespace}
        self._descriptors: Dict[str, TypeDescriptor] = {}

    @classmethod
    def build(cls, descriptors: Iterable[TypeDescriptor]) -> "ClassHierarchy":
        """Build a hierarchy from type descriptors.

        Identical duplicate descriptors are merged. Enclosing declarations are
        created before nested ones and missing prefixes become packages.

        Args:
            descriptors: Class and named parameter declarations.

        Returns:
            The populated hierarchy.

        Raises:
            HierarchyError: On name collisions or malformed metadata.

        Example:
            >>> hierarchy = ClassHierarchy.build([
            ...     TypeDescriptor(name="shapes.Shape", is_abstract=True),
            ...     TypeDescriptor(name="shapes.Circle", implements=("shapes.Shape",), constructor=Circle),
            ... ])
            >>> hierarchy.get_known_implementations(hierarchy.get_node("shapes.Shape"))
        """
        unique: Dict[str, TypeDescriptor] = {}
        for descriptor in descriptors:
            existing = unique.get(descriptor.name)
            if existing is None:
                unique[descriptor.name] = descriptor
                continue
            if existing == descriptor:
                continue
            if existing.kind != descriptor.kind:
                raise HierarchyError(
                    f"Incompatible declarations for '{descriptor.name}': "
                    f"declared as both {existing.kind.value} and {descriptor.kind.value}"
                )
            raise HierarchyError(f"Conflicting {descriptor.kind.value} declarations for '{descriptor.name}'")

        hierarchy = cls()
        for descriptor in sorted(unique.values(), key=lambda d: (len(split_name(d.name)), d.name)):
            hierarchy._add(descriptor)
        hierarchy._link()

        logger.info("Built class hierarchy with %d declarations", len(unique))
        return hierarchy

    def _add(self, descriptor: TypeDescriptor) -> None:
        segments = split_name(descriptor.name)
        parent: Node = self._namespace
        for depth, segment in enumerate(segments[:-1], start=1):
            child = parent.get_child(segment)
            if child is None:
                child = PackageNode(full_name=".".join(segments[:depth]), name=segment, parent_name=parent.full_name)
                self._attach(parent, child)
            elif isinstance(child, NamedParameterNode):
                raise HierarchyError(f"'{descriptor.name}' is nested inside named parameter '{child.full_name}'")
            parent = child

        if segments[-1] in parent.children:
            raise HierarchyError(f"'{descriptor.name}' collides with an implied package of the same name")

        self._descriptors[descriptor.name] = descriptor
        self._attach(parent, self._make_node(descriptor, parent))

    def _attach(self, parent: Node, child: Node) -> None:
        parent.children[child.name] = child
        self._nodes[child.full_name] = child

    def _make_node(self, descriptor: TypeDescriptor, parent: Node) -> Node:
        name = split_name(descriptor.name)[-1]

        if descriptor.kind == NodeKind.NAMED_PARAMETER:
            if descriptor.implements or descriptor.constructor_args:
                raise HierarchyError(f"Named parameter '{descriptor.name}' cannot implement types or take arguments")
            value_type = descriptor.value_type or "String"
            if value_type not in VALUE_TYPES:
                raise HierarchyError(f"Named parameter '{descriptor.name}' has unknown value type '{value_type}'")
            node = NamedParameterNode(
                full_name=descriptor.name,
                name=name,
                parent_name=parent.full_name,
                value_type=value_type,
                default_value=descriptor.default_value,
                documentation=descriptor.documentation,
                short_name=descriptor.short_name,
            )
            if node.default_value is not None:
                try:
                    self.parse_value(node, node.default_value)
                except ParameterTypeError as e:
                    raise HierarchyError(f"Invalid default for named parameter '{descriptor.name}': {e}") from e
            return node

        if descriptor.kind != NodeKind.CLASS:
            raise HierarchyError(f"'{descriptor.name}': packages are implied by names and cannot be declared")
        if descriptor.is_external and descriptor.factory is None:
            raise HierarchyError(f"External class '{descriptor.name}' has no registered factory")
        if not descriptor.is_abstract and not descriptor.is_external and descriptor.constructor is None:
            raise HierarchyError(f"Concrete class '{descriptor.name}' has no constructor")

        return ClassNode(
            full_name=descriptor.name,
            name=name,
            parent_name=parent.full_name,
            is_abstract=descriptor.is_abstract,
            is_external=descriptor.is_external,
            singleton_eligible=descriptor.singleton_eligible,
            constructor_args=descriptor.constructor_args,
            default_implementation=descriptor.default_implementation,
            constructor=descriptor.constructor,
            factory=descriptor.factory,
        )

    def _link(self) -> None:
        """Validate cross references and compute known implementations."""
        implementors: Dict[str, List[str]] = defaultdict(list)

        for name, descriptor in self._descriptors.items():
            for parent_name in descriptor.implements:
                target = self._nodes.get(parent_name)
                if not isinstance(target, ClassNode):
                    raise HierarchyError(f"'{name}' implements '{parent_name}', which is not a declared class")
                implementors[parent_name].append(name)

            for arg in descriptor.constructor_args:
                target = self._nodes.get(arg.target)
                expected = ClassNode if arg.kind == DependencyKind.SUB_OBJECT else NamedParameterNode
                if not isinstance(target, expected):
                    raise HierarchyError(
                        f"Constructor of '{name}' expects {arg.kind.value} '{arg.target}', "
                        f"which is not declared as one"
                    )

        for node in self._nodes.values():
            if not isinstance(node, ClassNode):
                continue
            known = set()
            queue = deque(implementors.get(node.full_name, ()))
            while queue:
                current = queue.popleft()
                if current in known:
                    continue
                known.add(current)
                queue.extend(implementors.get(current, ()))
            known.discard(node.full_name)
            if node.is_concrete:
                known.add(node.full_name)
            node.known_implementation_names = tuple(sorted(known))

            if node.default_implementation is not None and node.default_implementation not in known:
                raise HierarchyError(
                    f"Default implementation '{node.default_implementation}' of '{node.full_name}' "
                    f"is not a known implementation"
                )

    def get_node(self, name: str) -> Node:
        try:
            return self._nodes[name]
        except KeyError:
            raise NotFoundError(name) from None

    def lookup(self, node_or_name: Union[Node, str]) -> Node:
        """Return this hierarchy's node for a node object or a fully-qualified name.

        Raises:
            NotFoundError: If the node is not part of this hierarchy.
        """
        name = node_or_name.full_name if isinstance(node_or_name, Node) else node_or_name
        return self.get_node(name)

    def get_namespace(self) -> PackageNode:
        return self._namespace

    def get_known_implementations(self, node: Union[ClassNode, str]) -> List[ClassNode]:
        class_node = self.lookup(node)
        if not isinstance(class_node, ClassNode):
            raise HierarchyError(f"'{class_node.full_name}' is not a class")
        return [self._nodes[name] for name in class_node.known_implementation_names]

    def get_default_value(self, parameter: Union[NamedParameterNode, str]) -> Optional[Any]:
        """Return the parsed default of a named parameter, or None when it has none."""
        node = self.lookup(parameter)
        if not isinstance(node, NamedParameterNode):
            raise HierarchyError(f"'{node.full_name}' is not a named parameter")
        if node.default_value is None:
            return None
        return self.parse_value(node, node.default_value)

    def parse_value(self, parameter: NamedParameterNode, literal: Any) -> Any:
        """Convert a literal to the Python type of a named parameter.

        Scalars bound to string parameters are rendered with ``str``.

        Raises:
            ParameterTypeError: If the literal is not convertible.
        """
        if VALUE_TYPES[parameter.value_type] is str and isinstance(literal, (int, float)):
            literal = str(literal)
        adapter = _ADAPTERS[parameter.value_type]
        try:
            return adapter.validate_python(literal)
        except ValidationError as e:
            raise ParameterTypeError(parameter.full_name, literal, parameter.value_type) from e

    def nodes(self) -> List[Node]:
        """All nodes except the root, sorted by fully-qualified name."""
        return [self._nodes[name] for name in sorted(self._nodes) if name]

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes) - 1


class HierarchyCache:
    """Caches one class hierarchy per distinct set of type descriptors.

    Attributes:
        _hierarchies: Built hierarchies keyed by descriptor set.
        _lock: Serializes builds so each descriptor set is built once.
    """

    def __init__(self) -> None:
        self._hierarchies: Dict[FrozenSet[TypeDescriptor], ClassHierarchy] = {}
        self._lock = threading.Lock()

    def get(self, descriptors: Iterable[TypeDescriptor]) -> ClassHierarchy:
        """Return the cached hierarchy for these descriptors, building it on first use.

        Raises:
            HierarchyError: If the descriptors cannot form a hierarchy.
        """
        key = frozenset(descriptors)
        with self._lock:
            hierarchy = self._hierarchies.get(key)
            if hierarchy is None:
                hierarchy = ClassHierarchy.build(key)
                self._hierarchies[key] = hierarchy
            else:
                logger.debug("Reusing cached class hierarchy for %d descriptors", len(key))
            return hierarchy

    def clear(self) -> None:
        with self._lock:
            self._hierarchies.clear()

    def __len__(self) -> int:
        return len(self._hierarchies)
