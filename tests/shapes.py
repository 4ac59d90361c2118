"""A small shapes hierarchy shared by test modules."""

from bindgraph import ConstructorArg, DependencyKind, NodeKind, TypeDescriptor


class Circle:
    def __init__(self, radius):
        self.radius = radius


class Square:
    def __init__(self, side):
        self.side = side


class Canvas:
    def __init__(self, shape, title):
        self.shape = shape
        self.title = title


def parameter(name, value_type="String", default=None, doc=""):
    return TypeDescriptor(
        name=name,
        kind=NodeKind.NAMED_PARAMETER,
        value_type=value_type,
        default_value=default,
        documentation=doc,
    )


def sub_object(target, name=None):
    return ConstructorArg(kind=DependencyKind.SUB_OBJECT, target=target, name=name)


def named(target, name=None):
    return ConstructorArg(kind=DependencyKind.NAMED_PARAMETER, target=target, name=name)


def shapes_descriptors():
    return [
        parameter("shapes.Radius", "Integer", "1", "Circle radius"),
        parameter("shapes.Side", "Integer", "2"),
        parameter("shapes.Title", "String"),
        TypeDescriptor(name="shapes.Shape", is_abstract=True),
        TypeDescriptor(
            name="shapes.Circle",
            implements=("shapes.Shape",),
            constructor_args=(named("shapes.Radius", "radius"),),
            constructor=Circle,
        ),
        TypeDescriptor(
            name="shapes.Square",
            implements=("shapes.Shape",),
            constructor_args=(named("shapes.Side", "side"),),
            constructor=Square,
        ),
        TypeDescriptor(
            name="shapes.Canvas",
            constructor_args=(sub_object("shapes.Shape", "shape"), named("shapes.Title", "title")),
            constructor=Canvas,
        ),
    ]
