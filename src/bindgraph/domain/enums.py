from enum import Enum


class NodeKind(str, Enum):
    """Variants of a declaration node.

    Attributes:
        PACKAGE: Namespace container.
        CLASS: Class or interface declaration.
        NAMED_PARAMETER: Named scalar parameter declaration.
    """

    PACKAGE = "package"
    CLASS = "class"
    NAMED_PARAMETER = "named_parameter"

    def __str__(self) -> str:
        return self.value


class DependencyKind(str, Enum):
    """How a constructor argument is satisfied.

    Attributes:
        SUB_OBJECT: Resolved to an instance of another class node.
        NAMED_PARAMETER: Resolved to the bound or default value of a named parameter.
    """

    SUB_OBJECT = "sub_object"
    NAMED_PARAMETER = "named_parameter"

    def __str__(self) -> str:
        return self.value
