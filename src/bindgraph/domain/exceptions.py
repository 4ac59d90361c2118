from typing import List, Optional


class BindGraphException(Exception):
    """Base exception for configuration and injection errors."""


class HierarchyError(BindGraphException):
    """Raised when type descriptors cannot form a class hierarchy.

    This occurs when:
    - Two descriptors share a fully-qualified name with different shapes.
    - A descriptor references an unknown node or a node of the wrong kind.
    - A default value cannot be parsed as the declared value type.
    """


class NotFoundError(BindGraphException, LookupError):
    """Raised when a node name is not present in a class hierarchy.

    Attributes:
        name: The fully-qualified name that was looked up.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No node named '{name}' in class hierarchy")


class ConflictError(BindGraphException):
    """Raised when a bind call contradicts the hierarchy or earlier bindings.

    This occurs when:
    - An interface is bound to a second, different implementation.
    - The implementation is not a known implementation of the interface.
    - A class that is not singleton-eligible is marked singleton.
    """


class ParameterTypeError(BindGraphException, TypeError):
    """Raised when a literal cannot be parsed as a named parameter's type.

    Attributes:
        parameter: Fully-qualified name of the named parameter.
        value: The offending literal.
        value_type: The declared value type.
    """

    def __init__(self, parameter: str, value: object, value_type: str) -> None:
        self.parameter = parameter
        self.value = value
        self.value_type = value_type
        super().__init__(f"Cannot parse {value!r} as {value_type} for named parameter '{parameter}'")


class ResolutionError(BindGraphException):
    """Base class for failures of a single ``get_instance`` call.

    The message spells out the whole resolution chain, e.g.
    ``A requires B requires C: no implementation bound for C``.

    Attributes:
        chain: Fully-qualified names from the requested target to the failing node.
        reason: Description of the innermost failure.
    """

    def __init__(self, chain: List[str], reason: str) -> None:
        self.chain = list(chain)
        self.reason = reason
        super().__init__(f"{' requires '.join(self.chain)}: {reason}" if self.chain else reason)

    @property
    def target(self) -> Optional[str]:
        """The node originally requested, if any."""
        return self.chain[0] if self.chain else None


class NoImplementationError(ResolutionError):
    """Raised when a class node has no concrete implementation to construct."""


class AmbiguousBindingError(ResolutionError):
    """Raised when several concrete implementations exist and none is bound.

    Attributes:
        candidates: Fully-qualified names of the competing implementations.
    """

    def __init__(self, chain: List[str], reason: str, candidates: Optional[List[str]] = None) -> None:
        self.candidates = list(candidates or [])
        super().__init__(chain, reason)


class MissingParameterError(ResolutionError):
    """Raised when a named parameter has neither a bound value nor a default."""


class CyclicDependencyError(ResolutionError):
    """Raised when a node reappears on its own resolution path.

    Attributes:
        dependency_chain: The cycle, starting and ending with the repeated node.
    """

    def __init__(self, chain: List[str], dependency_chain: List[str]) -> None:
        self.dependency_chain = list(dependency_chain)
        super().__init__(chain, f"circular dependency detected: {' -> '.join(self.dependency_chain)}")


class ConstructionError(ResolutionError):
    """Raised when a constructor or external factory itself fails."""
