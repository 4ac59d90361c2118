from typing import Any, Callable, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bindgraph.domain.enums import DependencyKind, NodeKind

NAME_SEPARATOR = "."


def split_name(full_name: str) -> List[str]:
    """Split a fully-qualified name into its path segments."""
    return full_name.split(NAME_SEPARATOR) if full_name else []


class ConstructorArg(BaseModel):
    """Value object describing one constructor argument of a class.

    Attributes:
        kind: Whether the argument is a sub-object or a named parameter.
        target: Fully-qualified name of the node that satisfies the argument.
        name: Argument name in the constructor signature, for diagnostics.
    """

    model_config = ConfigDict(frozen=True)

    kind: DependencyKind = Field(..., description="How the argument is resolved.")
    target: str = Field(..., description="Fully-qualified name of the satisfying node.")
    name: Optional[str] = Field(default=None, description="Argument name in the constructor.")


class TypeDescriptor(BaseModel):
    """Pure-data registration record consumed by the class hierarchy.

    A descriptor declares either a class (interface, concrete or externally
    constructed) or a named parameter. Packages are never declared; they are
    implied by the dotted prefix of ``name``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="Fully-qualified dotted name.")
    kind: NodeKind = Field(default=NodeKind.CLASS, description="Declared node variant.")
    is_abstract: bool = False
    is_external: bool = False
    singleton_eligible: bool = True
    implements: Tuple[str, ...] = Field(default=(), description="Names of directly implemented types.")
    constructor_args: Tuple[ConstructorArg, ...] = ()
    default_implementation: Optional[str] = None
    constructor: Optional[Callable[..., Any]] = None
    factory: Optional[Callable[..., Any]] = None
    value_type: Optional[str] = None
    default_value: Optional[str] = None
    documentation: str = ""
    short_name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value or any(not segment for segment in value.split(NAME_SEPARATOR)):
            raise ValueError(f"invalid fully-qualified name: {value!r}")
        # Keeps per-level short-name order equal to full-name order.
        if any(char < NAME_SEPARATOR for char in value):
            raise ValueError(f"fully-qualified name {value!r} contains a character ordered before '{NAME_SEPARATOR}'")
        return value


class Node(BaseModel):
    """A declaration node of the class hierarchy.

    Attributes:
        kind: Node variant.
        full_name: Unique fully-qualified name; empty for the namespace root.
        name: Short name (last segment of ``full_name``).
        parent_name: Fully-qualified name of the owning node, None for the root.
        children: Owned nodes keyed by short name.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: NodeKind
    full_name: str
    name: str
    parent_name: Optional[str] = None
    children: Dict[str, "Node"] = Field(default_factory=dict, repr=False)

    def get_child(self, name: str) -> Optional["Node"]:
        return self.children.get(name)

    def sorted_children(self) -> List["Node"]:
        """Children in lexicographic order of their short names."""
        return [self.children[name] for name in sorted(self.children)]

    def __str__(self) -> str:
        return self.full_name


class PackageNode(Node):
    """Namespace container."""

    kind: Literal[NodeKind.PACKAGE] = NodeKind.PACKAGE


class ClassNode(Node):
    """Class or interface declaration.

    Attributes:
        is_abstract: True for interfaces and abstract classes.
        is_external: True when instances come from ``factory`` instead of ``constructor``.
        singleton_eligible: Whether the class may be marked singleton.
        known_implementation_names: Sorted names of classes satisfying this type.
        constructor_args: Ordered constructor dependencies.
        default_implementation: Implementation used when nothing is bound.
    """

    kind: Literal[NodeKind.CLASS] = NodeKind.CLASS
    is_abstract: bool = False
    is_external: bool = False
    singleton_eligible: bool = True
    known_implementation_names: Tuple[str, ...] = ()
    constructor_args: Tuple[ConstructorArg, ...] = ()
    default_implementation: Optional[str] = None
    constructor: Optional[Callable[..., Any]] = Field(default=None, repr=False)
    factory: Optional[Callable[..., Any]] = Field(default=None, repr=False)

    @property
    def is_concrete(self) -> bool:
        return not self.is_abstract


class NamedParameterNode(Node):
    """Named scalar parameter declaration.

    Attributes:
        value_type: Descriptive name of the value type, e.g. ``Integer``.
        default_value: Default literal, or None when the parameter has no default.
        documentation: Short human-readable description.
        short_name: Optional alias, e.g. a command-line flag name.
    """

    kind: Literal[NodeKind.NAMED_PARAMETER] = NodeKind.NAMED_PARAMETER
    value_type: str = "String"
    default_value: Optional[str] = None
    documentation: str = ""
    short_name: Optional[str] = None
