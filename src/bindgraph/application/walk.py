"""Application layer - Pre-order traversal of the declaration node tree."""

from typing import Callable, Optional

from bindgraph.domain import ClassNode, INodeVisitor, NamedParameterNode, Node, PackageNode


class CallbackVisitor(INodeVisitor):
    """Visitor assembled from per-variant callbacks.

    Variants without a callback are visited and continue into their children.

    Example:
        >>> names = []
        >>> visitor = CallbackVisitor(on_class=lambda node: names.append(node.full_name) or True)
        >>> preorder(visitor, hierarchy.get_namespace())
    """

    def __init__(
        self,
        on_package: Optional[Callable[[PackageNode], bool]] = None,
        on_class: Optional[Callable[[ClassNode], bool]] = None,
        on_named_parameter: Optional[Callable[[NamedParameterNode], bool]] = None,
        on_edge: Optional[Callable[[Node, Node], bool]] = None,
    ) -> None:
        self._on_package = on_package
        self._on_class = on_class
        self._on_named_parameter = on_named_parameter
        self._on_edge = on_edge

    def visit_package(self, node: PackageNode) -> bool:
        return self._on_package(node) if self._on_package else True

    def visit_class(self, node: ClassNode) -> bool:
        return self._on_class(node) if self._on_class else True

    def visit_named_parameter(self, node: NamedParameterNode) -> bool:
        return self._on_named_parameter(node) if self._on_named_parameter else True

    def visit_edge(self, parent: Node, child: Node) -> bool:
        return self._on_edge(parent, child) if self._on_edge else True


def visit_node(visitor: INodeVisitor, node: Node) -> bool:
    """Dispatch ``node`` to the visitor method for its variant."""
    if isinstance(node, ClassNode):
        return visitor.visit_class(node)
    if isinstance(node, NamedParameterNode):
        return visitor.visit_named_parameter(node)
    if isinstance(node, PackageNode):
        return visitor.visit_package(node)
    raise TypeError(f"Unsupported node type: {type(node).__name__}")


def preorder(visitor: INodeVisitor, root: Node) -> bool:
    """Walk the tree under ``root`` in pre-order.

    Each node is visited before its children. Children are taken in
    lexicographic order of their short names; the containment edge to a
    child is visited before the child itself. A False from a node visit skips
    that node's children, a False from an edge visit skips that child.

    Args:
        visitor: Callbacks for nodes and containment edges.
        root: Node to start from, usually the hierarchy namespace.

    Returns:
        True if every visit continued, False if any subtree was skipped.
    """
    if not visit_node(visitor, root):
        return False

    complete = True
    for child in root.sorted_children():
        if visitor.visit_edge(root, child):
            complete = preorder(visitor, child) and complete
        else:
            complete = False
    return complete
