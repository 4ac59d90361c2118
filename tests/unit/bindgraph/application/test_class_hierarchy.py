"""Unit tests for ClassHierarchy."""

import pytest

from bindgraph.application.class_hierarchy import ClassHierarchy, HierarchyCache
from bindgraph.domain import (
    ClassNode,
    HierarchyError,
    IClassHierarchy,
    NamedParameterNode,
    NodeKind,
    NotFoundError,
    PackageNode,
    ParameterTypeError,
    TypeDescriptor,
)
from shapes import Circle, named, parameter, shapes_descriptors, sub_object


class TestHierarchyBuild:
    """Test cases for building a hierarchy from descriptors."""

    def test_implements_interface(self, shapes_hierarchy):
        """Test that ClassHierarchy implements IClassHierarchy."""
        assert isinstance(shapes_hierarchy, IClassHierarchy)

    def test_namespace_root(self, shapes_hierarchy):
        """Test the root is the empty-named package."""
        root = shapes_hierarchy.get_namespace()
        assert isinstance(root, PackageNode)
        assert root.full_name == ""
        assert root.parent_name is None
        assert shapes_hierarchy.get_node("") is root

    def test_implied_packages(self, shapes_hierarchy):
        """Test that dotted prefixes become package nodes."""
        package = shapes_hierarchy.get_node("shapes")
        assert isinstance(package, PackageNode)
        assert package.parent_name == ""
        assert sorted(package.children) == ["Canvas", "Circle", "Radius", "Shape", "Side", "Square", "Title"]

    def test_node_variants(self, shapes_hierarchy):
        """Test that descriptors produce the matching node variant."""
        circle = shapes_hierarchy.get_node("shapes.Circle")
        radius = shapes_hierarchy.get_node("shapes.Radius")
        assert isinstance(circle, ClassNode)
        assert circle.name == "Circle"
        assert circle.parent_name == "shapes"
        assert isinstance(radius, NamedParameterNode)
        assert radius.value_type == "Integer"
        assert radius.default_value == "1"
        assert radius.documentation == "Circle radius"

    def test_deeply_nested_packages(self):
        """Test that every missing prefix level is created."""
        hierarchy = ClassHierarchy.build([parameter("org.example.deep.Port", "Integer", "80")])
        assert isinstance(hierarchy.get_node("org"), PackageNode)
        assert isinstance(hierarchy.get_node("org.example"), PackageNode)
        assert hierarchy.get_node("org.example.deep").children["Port"].full_name == "org.example.deep.Port"

    def test_parameter_nested_in_class(self):
        """Test that a named parameter may be declared inside a class."""
        hierarchy = ClassHierarchy.build(
            [
                TypeDescriptor(name="app.Server", constructor=object),
                parameter("app.Server.Port", "Integer", "80"),
            ]
        )
        server = hierarchy.get_node("app.Server")
        assert server.get_child("Port") is hierarchy.get_node("app.Server.Port")

    def test_descriptor_order_does_not_matter(self):
        """Test that nested declarations may come before their enclosing class."""
        hierarchy = ClassHierarchy.build(
            [
                parameter("app.Server.Port", "Integer", "80"),
                TypeDescriptor(name="app.Server", constructor=object),
            ]
        )
        assert isinstance(hierarchy.get_node("app.Server"), ClassNode)

    def test_identical_duplicates_are_merged(self):
        """Test that the same descriptor twice is accepted."""
        descriptors = shapes_descriptors()
        hierarchy = ClassHierarchy.build(descriptors + descriptors)
        assert len(hierarchy) == len(ClassHierarchy.build(descriptors))

    def test_len_and_contains(self, shapes_hierarchy):
        """Test node counting and membership."""
        assert len(shapes_hierarchy) == 8
        assert "shapes.Circle" in shapes_hierarchy
        assert "shapes.Hexagon" not in shapes_hierarchy

    def test_nodes_sorted_by_name(self, shapes_hierarchy):
        """Test that nodes() is ordered by fully-qualified name."""
        names = [node.full_name for node in shapes_hierarchy.nodes()]
        assert names == sorted(names)
        assert names[0] == "shapes"


class TestHierarchyErrors:
    """Test cases for malformed descriptor sets."""

    def test_class_and_parameter_collide(self):
        """Test that one name declared as two variants is rejected."""
        with pytest.raises(HierarchyError, match="declared as both"):
            ClassHierarchy.build([TypeDescriptor(name="app.X", constructor=object), parameter("app.X")])

    def test_conflicting_class_declarations(self):
        """Test that two different class declarations of a name are rejected."""
        with pytest.raises(HierarchyError, match="Conflicting"):
            ClassHierarchy.build(
                [
                    TypeDescriptor(name="app.X", constructor=object),
                    TypeDescriptor(name="app.X", is_abstract=True),
                ]
            )

    def test_nested_inside_named_parameter(self):
        """Test that named parameters cannot own nodes."""
        with pytest.raises(HierarchyError, match="inside named parameter"):
            ClassHierarchy.build([parameter("app.Port"), parameter("app.Port.Inner")])

    def test_package_kind_cannot_be_declared(self):
        """Test that packages are only implied."""
        with pytest.raises(HierarchyError, match="implied"):
            ClassHierarchy.build([TypeDescriptor(name="app", kind=NodeKind.PACKAGE)])

    def test_unknown_implemented_type(self):
        """Test that implementing an undeclared type is rejected."""
        with pytest.raises(HierarchyError, match="not a declared class"):
            ClassHierarchy.build([TypeDescriptor(name="app.A", implements=("app.Missing",), constructor=object)])

    def test_implementing_a_parameter(self):
        """Test that only classes can be implemented."""
        with pytest.raises(HierarchyError, match="not a declared class"):
            ClassHierarchy.build(
                [parameter("app.Port"), TypeDescriptor(name="app.A", implements=("app.Port",), constructor=object)]
            )

    def test_constructor_arg_of_wrong_kind(self):
        """Test that a sub-object argument must point at a class."""
        with pytest.raises(HierarchyError, match="expects sub_object"):
            ClassHierarchy.build(
                [
                    parameter("app.Port"),
                    TypeDescriptor(name="app.A", constructor_args=(sub_object("app.Port"),), constructor=object),
                ]
            )

    def test_constructor_arg_unknown(self):
        """Test that a named-parameter argument must exist."""
        with pytest.raises(HierarchyError, match="expects named_parameter"):
            ClassHierarchy.build(
                [TypeDescriptor(name="app.A", constructor_args=(named("app.Port"),), constructor=object)]
            )

    def test_concrete_class_without_constructor(self):
        """Test that concrete classes need a constructor."""
        with pytest.raises(HierarchyError, match="no constructor"):
            ClassHierarchy.build([TypeDescriptor(name="app.A")])

    def test_external_class_without_factory(self):
        """Test that external classes need a factory."""
        with pytest.raises(HierarchyError, match="no registered factory"):
            ClassHierarchy.build([TypeDescriptor(name="app.A", is_external=True)])

    def test_unknown_value_type(self):
        """Test that the value type must be supported."""
        with pytest.raises(HierarchyError, match="unknown value type"):
            ClassHierarchy.build([parameter("app.When", "Timestamp")])

    def test_invalid_default_value(self):
        """Test that defaults must parse as the declared type."""
        with pytest.raises(HierarchyError, match="Invalid default"):
            ClassHierarchy.build([parameter("app.Port", "Integer", "eighty")])

    def test_parameter_with_constructor_args(self):
        """Test that named parameters cannot take arguments."""
        with pytest.raises(HierarchyError, match="cannot implement"):
            ClassHierarchy.build(
                [
                    TypeDescriptor(name="app.Base", is_abstract=True),
                    TypeDescriptor(name="app.Port", kind=NodeKind.NAMED_PARAMETER, implements=("app.Base",)),
                ]
            )

    def test_default_implementation_must_be_known(self):
        """Test that a default implementation must implement the type."""
        with pytest.raises(HierarchyError, match="not a known implementation"):
            ClassHierarchy.build(
                [
                    TypeDescriptor(name="app.I", is_abstract=True, default_implementation="app.Other"),
                    TypeDescriptor(name="app.Other", constructor=object),
                ]
            )


class TestHierarchyQueries:
    """Test cases for hierarchy lookups."""

    def test_get_node_missing(self, shapes_hierarchy):
        """Test that unknown names raise NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            shapes_hierarchy.get_node("shapes.Hexagon")
        assert exc_info.value.name == "shapes.Hexagon"

    def test_lookup_accepts_nodes_and_names(self, shapes_hierarchy):
        """Test lookup by node object or name."""
        circle = shapes_hierarchy.get_node("shapes.Circle")
        assert shapes_hierarchy.lookup(circle) is circle
        assert shapes_hierarchy.lookup("shapes.Circle") is circle

    def test_lookup_foreign_node(self, shapes_hierarchy):
        """Test that a node of another hierarchy resolves to this hierarchy's node."""
        other = ClassHierarchy.build(shapes_descriptors())
        foreign = other.get_node("shapes.Circle")
        assert shapes_hierarchy.lookup(foreign) is shapes_hierarchy.get_node("shapes.Circle")

    def test_known_implementations_of_interface(self, shapes_hierarchy):
        """Test that interfaces list their implementations sorted by name."""
        impls = shapes_hierarchy.get_known_implementations("shapes.Shape")
        assert [impl.full_name for impl in impls] == ["shapes.Circle", "shapes.Square"]

    def test_concrete_class_includes_itself(self, shapes_hierarchy):
        """Test that a concrete class is its own known implementation."""
        circle = shapes_hierarchy.get_node("shapes.Circle")
        assert shapes_hierarchy.get_known_implementations(circle) == [circle]

    def test_abstract_without_implementations(self):
        """Test that an unimplemented interface has no known implementations."""
        hierarchy = ClassHierarchy.build([TypeDescriptor(name="app.I", is_abstract=True)])
        assert hierarchy.get_known_implementations("app.I") == []

    def test_transitive_implementations(self):
        """Test that implementations of sub-interfaces are known to the base."""
        hierarchy = ClassHierarchy.build(
            [
                TypeDescriptor(name="app.Base", is_abstract=True),
                TypeDescriptor(name="app.Middle", is_abstract=True, implements=("app.Base",)),
                TypeDescriptor(name="app.Leaf", implements=("app.Middle",), constructor=object),
            ]
        )
        names = [node.full_name for node in hierarchy.get_known_implementations("app.Base")]
        assert names == ["app.Leaf", "app.Middle"]
        assert [node.full_name for node in hierarchy.get_known_implementations("app.Middle")] == ["app.Leaf"]

    def test_implements_cycle_terminates(self):
        """Test that mutually implementing interfaces do not loop."""
        hierarchy = ClassHierarchy.build(
            [
                TypeDescriptor(name="app.A", is_abstract=True, implements=("app.B",)),
                TypeDescriptor(name="app.B", is_abstract=True, implements=("app.A",)),
            ]
        )
        assert [node.full_name for node in hierarchy.get_known_implementations("app.A")] == ["app.B"]

    def test_known_implementations_of_parameter(self, shapes_hierarchy):
        """Test that only classes have implementations."""
        with pytest.raises(HierarchyError):
            shapes_hierarchy.get_known_implementations("shapes.Radius")

    def test_default_values(self, shapes_hierarchy):
        """Test that defaults are parsed into the declared type."""
        assert shapes_hierarchy.get_default_value("shapes.Radius") == 1
        assert shapes_hierarchy.get_default_value("shapes.Title") is None

    @pytest.mark.parametrize(
        "value_type, literal, expected",
        [
            ("Integer", "5", 5),
            ("Long", 7, 7),
            ("Double", "2.5", 2.5),
            ("Boolean", "true", True),
            ("Boolean", "False", False),
            ("String", "hello", "hello"),
            ("String", 5, "5"),
            ("String", 2.5, "2.5"),
            ("String", True, "True"),
        ],
    )
    def test_parse_value(self, value_type, literal, expected):
        """Test lexical conversion of literals."""
        hierarchy = ClassHierarchy.build([parameter("app.P", value_type)])
        assert hierarchy.parse_value(hierarchy.get_node("app.P"), literal) == expected

    @pytest.mark.parametrize(
        "value_type, literal",
        [("Integer", "5.5"), ("Integer", "five"), ("Boolean", "maybe"), ("String", ["x"])],
    )
    def test_parse_value_rejects(self, value_type, literal):
        """Test that unconvertible literals raise ParameterTypeError."""
        hierarchy = ClassHierarchy.build([parameter("app.P", value_type)])
        with pytest.raises(ParameterTypeError):
            hierarchy.parse_value(hierarchy.get_node("app.P"), literal)


class TestHierarchyCache:
    """Test cases for HierarchyCache."""

    def test_same_descriptors_share_hierarchy(self):
        """Test that equal descriptor sets return the same hierarchy."""
        cache = HierarchyCache()
        first = cache.get(shapes_descriptors())
        second = cache.get(list(reversed(shapes_descriptors())))
        assert first is second
        assert len(cache) == 1

    def test_different_descriptors_build_new_hierarchy(self):
        """Test that distinct descriptor sets are cached separately."""
        cache = HierarchyCache()
        first = cache.get(shapes_descriptors())
        second = cache.get([TypeDescriptor(name="app.A", constructor=Circle)])
        assert first is not second
        assert len(cache) == 2

    def test_clear(self):
        """Test that clear drops cached hierarchies."""
        cache = HierarchyCache()
        first = cache.get(shapes_descriptors())
        cache.clear()
        assert len(cache) == 0
        assert cache.get(shapes_descriptors()) is not first

    def test_errors_are_not_cached(self):
        """Test that a failing build raises every time."""
        cache = HierarchyCache()
        for _ in range(2):
            with pytest.raises(HierarchyError):
                cache.get([TypeDescriptor(name="app.A")])
        assert len(cache) == 0
