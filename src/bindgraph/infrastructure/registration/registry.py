import inspect
import logging
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from pydantic import BaseModel, ConfigDict, Field

from bindgraph.application import ClassHierarchy
from bindgraph.domain import ConstructorArg, DependencyKind, HierarchyError, NodeKind, TypeDescriptor

logger = logging.getLogger(__name__)

TypeRef = Union[Type, str]


class Parameter(BaseModel):
    """Marks a constructor argument as a named parameter.

    Used inside ``Annotated`` type hints or in the argument list of an
    external factory.

    Example:
        >>> class Circle(Shape):
        ...     def __init__(self, radius: Annotated[int, Parameter("shapes.Radius")]):
        ...         self.radius = radius
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Fully-qualified name of the named parameter.")

    def __init__(self, name: str, **data: Any) -> None:
        super().__init__(name=name, **data)


class _ClassEntry(BaseModel):
    """Pending class registration, turned into a descriptor once all names are known."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    target_class: Optional[Type] = None
    is_abstract: bool = False
    is_external: bool = False
    singleton_eligible: bool = True
    implements: Optional[Tuple[Any, ...]] = None
    default_implementation: Optional[Any] = None
    factory: Optional[Callable[..., Any]] = None
    factory_args: Tuple[Any, ...] = ()


def _keyword_constructor(cls: Type, names: Sequence[str]) -> Callable[..., Any]:
    def construct(*args: Any) -> Any:
        return cls(**dict(zip(names, args)))

    construct.__name__ = f"construct_{cls.__name__}"
    construct.__qualname__ = construct.__name__
    return construct


class TypeRegistry:
    """Produces type descriptors from Python classes and declarations.

    Constructor dependencies of registered classes are read from the type
    hints of ``__init__``: a hint of a registered class is a sub-object, a hint
    annotated with ``Parameter`` is a named parameter. Registration order does
    not matter; names are resolved when ``descriptors`` is called.

    Attributes:
        _parameters: Named parameter descriptors keyed by name.
        _classes: Pending class registrations keyed by name.
        _names: Registered Python classes to their fully-qualified names.
        _built: Memoized descriptors, reset on every registration.

    Example:
        >>> registry = TypeRegistry()
        >>> registry.named_parameter("shapes.Radius", "Integer", default="1")
        >>> registry.interface(Shape, name="shapes.Shape")
        >>> registry.register_class(Circle, name="shapes.Circle")
        >>> hierarchy = registry.build_hierarchy()
    """

    def __init__(self) -> None:
        self._parameters: Dict[str, TypeDescriptor] = {}
        self._classes: Dict[str, _ClassEntry] = {}
        self._names: Dict[Type, str] = {}
        self._built: Optional[Tuple[TypeDescriptor, ...]] = None

    def _claim(self, name: str) -> None:
        if name in self._parameters or name in self._classes:
            raise HierarchyError(f"'{name}' is already registered")
        self._built = None

    @staticmethod
    def default_name(cls: Type) -> str:
        return f"{cls.__module__}.{cls.__qualname__}"

    def name_of(self, ref: TypeRef) -> str:
        """Return the registered name for a class, or the name itself.

        Raises:
            HierarchyError: If the class was never registered.
        """
        if isinstance(ref, str):
            return ref
        try:
            return self._names[ref]
        except KeyError:
            raise HierarchyError(f"Class {ref.__qualname__} is not registered") from None

    def named_parameter(
        self,
        name: str,
        value_type: str = "String",
        default: Optional[Any] = None,
        doc: str = "",
        short_name: Optional[str] = None,
    ) -> str:
        """Declare a named parameter.

        Returns:
            The parameter name, for use in ``Parameter`` markers.
        """
        self._claim(name)
        self._parameters[name] = TypeDescriptor(
            name=name,
            kind=NodeKind.NAMED_PARAMETER,
            value_type=value_type,
            default_value=None if default is None else str(default),
            documentation=doc,
            short_name=short_name,
        )
        return name

    def interface(
        self,
        ref: TypeRef,
        name: Optional[str] = None,
        implements: Optional[Iterable[TypeRef]] = None,
        default_implementation: Optional[TypeRef] = None,
    ) -> str:
        """Declare an abstract type that is never constructed directly."""
        cls = None if isinstance(ref, str) else ref
        full_name = name or (ref if isinstance(ref, str) else self.default_name(ref))
        self._claim(full_name)
        if cls is not None:
            self._names[cls] = full_name
        self._classes[full_name] = _ClassEntry(
            name=full_name,
            target_class=cls,
            is_abstract=True,
            implements=None if implements is None else tuple(implements),
            default_implementation=default_implementation,
        )
        return full_name

    def register_class(
        self,
        cls: Type,
        name: Optional[str] = None,
        implements: Optional[Iterable[TypeRef]] = None,
        is_abstract: Optional[bool] = None,
        singleton_eligible: bool = True,
        default_implementation: Optional[TypeRef] = None,
    ) -> str:
        """Register a class constructed by the injector.

        Args:
            cls: The class; its ``__init__`` type hints define the dependencies.
            name: Fully-qualified name, defaults to module and qualified name.
            implements: Types the class directly implements. Defaults to the
                registered classes among its Python base classes.
            is_abstract: Override for ``inspect.isabstract``.
            singleton_eligible: Whether the class may be marked singleton.
            default_implementation: Implementation used when nothing is bound.

        Returns:
            The registered name.
        """
        full_name = name or self.default_name(cls)
        self._claim(full_name)
        self._names[cls] = full_name
        self._classes[full_name] = _ClassEntry(
            name=full_name,
            target_class=cls,
            is_abstract=inspect.isabstract(cls) if is_abstract is None else is_abstract,
            singleton_eligible=singleton_eligible,
            implements=None if implements is None else tuple(implements),
            default_implementation=default_implementation,
        )
        return full_name

    def implementation(
        self, name: Optional[str] = None, implements: Optional[Iterable[TypeRef]] = None, **options: Any
    ) -> Callable:
        """Decorator form of ``register_class``.

        Example:
            >>> @registry.implementation("shapes.Square", implements=[Shape])
            ... class Square(Shape):
            ...     pass
        """

        def decorator(cls: Type) -> Type:
            self.register_class(cls, name=name, implements=implements, **options)
            return cls

        return decorator

    def register_external(
        self,
        name: str,
        factory: Callable[..., Any],
        implements: Iterable[TypeRef] = (),
        args: Iterable[Union[TypeRef, Parameter]] = (),
        singleton_eligible: bool = True,
    ) -> str:
        """Register a class whose instances come from an external factory.

        Args:
            name: Fully-qualified name of the class.
            factory: Callable invoked with the resolved arguments, in order.
            implements: Types the produced instances implement.
            args: Factory arguments; classes are sub-objects, ``Parameter``
                markers are named parameters.
        """
        self._claim(name)
        self._classes[name] = _ClassEntry(
            name=name,
            is_external=True,
            singleton_eligible=singleton_eligible,
            implements=tuple(implements),
            factory=factory,
            factory_args=tuple(args),
        )
        return name

    def _arg(self, ref: Union[TypeRef, Parameter], arg_name: Optional[str] = None) -> ConstructorArg:
        if isinstance(ref, Parameter):
            return ConstructorArg(kind=DependencyKind.NAMED_PARAMETER, target=ref.name, name=arg_name)
        return ConstructorArg(kind=DependencyKind.SUB_OBJECT, target=self.name_of(ref), name=arg_name)

    def _constructor_args(self, entry: _ClassEntry) -> Tuple[List[ConstructorArg], Callable[..., Any]]:
        cls = entry.target_class
        try:
            signature = inspect.signature(cls.__init__)
            type_hints = get_type_hints(cls.__init__, include_extras=True)
        except (NameError, TypeError, ValueError) as e:
            raise HierarchyError(f"Cannot introspect constructor of '{entry.name}': {e}") from e

        args: List[ConstructorArg] = []
        for param_name, param in signature.parameters.items():
            if param_name == "self" or param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            if param.kind == inspect.Parameter.POSITIONAL_ONLY:
                raise HierarchyError(f"Constructor of '{entry.name}' has positional-only parameter '{param_name}'")

            hint = type_hints.get(param_name)
            if get_origin(hint) is Annotated:
                markers = [meta for meta in get_args(hint)[1:] if isinstance(meta, Parameter)]
                if markers:
                    args.append(self._arg(markers[0], param_name))
                    continue
                hint = get_args(hint)[0]

            if hint in self._names:
                args.append(self._arg(hint, param_name))
            elif param.default is not inspect.Parameter.empty:
                # Left to the Python default
                continue
            else:
                raise HierarchyError(
                    f"Parameter '{param_name}' of '{entry.name}' is neither a registered class "
                    f"nor a named parameter and has no default value"
                )

        return args, _keyword_constructor(cls, [arg.name for arg in args])

    def _implemented(self, entry: _ClassEntry) -> Tuple[str, ...]:
        if entry.implements is not None:
            return tuple(self.name_of(ref) for ref in entry.implements)
        if entry.target_class is None:
            return ()
        return tuple(self._names[base] for base in entry.target_class.__mro__[1:] if base in self._names)

    def _class_descriptor(self, entry: _ClassEntry) -> TypeDescriptor:
        implements = self._implemented(entry)
        default_implementation = (
            None if entry.default_implementation is None else self.name_of(entry.default_implementation)
        )
        if entry.is_external:
            return TypeDescriptor(
                name=entry.name,
                is_external=True,
                singleton_eligible=entry.singleton_eligible,
                implements=implements,
                constructor_args=tuple(self._arg(ref) for ref in entry.factory_args),
                factory=entry.factory,
            )
        if entry.is_abstract:
            return TypeDescriptor(
                name=entry.name,
                is_abstract=True,
                singleton_eligible=entry.singleton_eligible,
                implements=implements,
                default_implementation=default_implementation,
            )

        args, constructor = self._constructor_args(entry)
        return TypeDescriptor(
            name=entry.name,
            singleton_eligible=entry.singleton_eligible,
            implements=implements,
            constructor_args=tuple(args),
            default_implementation=default_implementation,
            constructor=constructor,
        )

    def descriptors(self) -> Tuple[TypeDescriptor, ...]:
        """Return the descriptors of every registration, parameters first.

        Repeated calls without new registrations return equal descriptors, so
        they share an entry in a ``HierarchyCache``.

        Raises:
            HierarchyError: If a referenced class is unregistered or a
                constructor cannot be introspected.
        """
        if self._built is None:
            classes = tuple(self._class_descriptor(entry) for entry in self._classes.values())
            self._built = tuple(self._parameters.values()) + classes
            logger.debug("Produced %d type descriptors", len(self._built))
        return self._built

    def build_hierarchy(self) -> ClassHierarchy:
        return ClassHierarchy.build(self.descriptors())
