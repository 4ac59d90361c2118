from typing import List

from pydantic import BaseModel, ConfigDict, Field

from bindgraph.application import Configuration, preorder
from bindgraph.domain import ClassNode, INodeVisitor, NamedParameterNode, Node, PackageNode

# Legend ids start with "." so they never equal a declared name.
LEGEND = (
    "  subgraph cluster_legend {\n"
    '    label="Legend";\n'
    "    shape=box;\n"
    "    subgraph cluster_1 {\n"
    '      style=invis; label="";\n'
    '      ".legend_ex1l" [shape=point, label=""]; ".legend_ex1r" [shape=point, label=""];\n'
    '      ".legend_ex2l" [shape=point, label=""]; ".legend_ex2r" [shape=point, label=""];\n'
    '      ".legend_ex3l" [shape=point, label=""]; ".legend_ex3r" [shape=point, label=""];\n'
    '      ".legend_ex4l" [shape=point, label=""]; ".legend_ex4r" [shape=point, label=""];\n'
    '      ".legend_ex1l" -> ".legend_ex1r" [style=solid, dir=back, arrowtail=diamond, label="contains"];\n'
    '      ".legend_ex2l" -> ".legend_ex2r" [style=dashed, dir=back, arrowtail=empty, label="implements"];\n'
    '      ".legend_ex3l" -> ".legend_ex3r" [style="dashed,bold", dir=back, arrowtail=empty, label="external"];\n'
    '      ".legend_ex4l" -> ".legend_ex4r" [style=solid, dir=back, arrowtail=normal, label="binds"];\n'
    "    }\n"
    "    subgraph cluster_2 {\n"
    '      style=invis; label="";\n'
    '      ".legend_package" [label="PackageNode", shape=folder];\n'
    '      ".legend_class" [label="ClassNode", shape=box];\n'
    '      ".legend_singleton" [label="Singleton", shape=box, style=filled];\n'
    '      ".legend_parameter" [label="NamedParameterNode", shape=oval];\n'
    "    }\n"
    "  }\n"
)

HEADER = "digraph ConfigMain {\n  rankdir=LR;\n"

CONTAINS_STYLE = "style=solid, dir=back, arrowtail=diamond"
IMPLEMENTS_STYLE = 'style="dashed", dir=back, arrowtail=empty'
EXTERNAL_STYLE = 'style="dashed,bold", dir=back, arrowtail=empty'
BINDS_STYLE = "style=solid, dir=back, arrowtail=normal"


class GraphvizOptions(BaseModel):
    """Rendering options for the configuration graph.

    Attributes:
        show_impl: Draw "implements" edges for every known implementation,
            not only for externally constructed ones.
        show_legend: Prepend a legend cluster describing edge and node styles.
    """

    model_config = ConfigDict(frozen=True)

    show_impl: bool = Field(default=False, description="Draw all known implementation edges.")
    show_legend: bool = Field(default=True, description="Include the legend cluster.")


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _quote(text: str) -> str:
    return f'"{_escape(text)}"'


class GraphvizConfigVisitor(INodeVisitor):
    """Renders a configuration graph in Graphviz DOT format.

    Node identifiers are the quoted fully-qualified names, labels the short
    names. The visitor only reads the configuration.

    Attributes:
        _configuration: Configuration being rendered.
        _options: Rendering options.
        _lines: Accumulated DOT statements.
    """

    def __init__(self, configuration: Configuration, options: GraphvizOptions = GraphvizOptions()) -> None:
        self._configuration = configuration
        self._options = options
        self._lines: List[str] = [HEADER]
        if options.show_legend:
            self._lines.append(LEGEND)

    def to_string(self) -> str:
        """Return the DOT document accumulated so far, closed."""
        return "".join(self._lines) + "}\n"

    def __str__(self) -> str:
        return self.to_string()

    def _edge(self, source: Node, target: Node, attributes: str) -> None:
        self._lines.append(f"  {_quote(source.full_name)} -> {_quote(target.full_name)} [{attributes}];\n")

    def visit_package(self, node: PackageNode) -> bool:
        if node.full_name:
            self._lines.append(f"  {_quote(node.full_name)} [label={_quote(node.full_name)}, shape=folder];\n")
        return True

    def visit_class(self, node: ClassNode) -> bool:
        style = ", style=filled" if self._configuration.is_singleton(node) else ""
        self._lines.append(f"  {_quote(node.full_name)} [label={_quote(node.name)}, shape=box{style}];\n")

        bound = self._configuration.get_bound_implementation(node)
        if bound is not None:
            self._edge(node, bound, BINDS_STYLE)

        hierarchy = self._configuration.class_hierarchy
        for impl in hierarchy.get_known_implementations(node):
            if impl is bound or impl is node:
                continue
            if impl.is_external:
                self._edge(node, impl, EXTERNAL_STYLE)
            elif self._options.show_impl:
                self._edge(node, impl, IMPLEMENTS_STYLE)
        return True

    def visit_named_parameter(self, node: NamedParameterNode) -> bool:
        configuration = self._configuration
        value_line = node.name
        bound = configuration.is_parameter_bound(node)
        if bound:
            value_line += f" = {configuration.get_bound_parameter_literal(node)}"

        parts = [node.value_type, value_line]
        if node.default_value is not None:
            default = configuration.class_hierarchy.get_default_value(node)
            if not bound or configuration.get_bound_parameter_value(node) != default:
                parts.append(f"(default = {node.default_value})")

        label = "\\n".join(_escape(part) for part in parts)
        self._lines.append(f'  {_quote(node.full_name)} [label="{label}", shape=oval];\n')
        return True

    def visit_edge(self, parent: Node, child: Node) -> bool:
        if parent.full_name:
            self._edge(parent, child, CONTAINS_STYLE)
        return True


def get_graphviz_string(configuration: Configuration, show_impl: bool = False, show_legend: bool = True) -> str:
    """Produce a Graphviz DOT document for a configuration.

    The output is deterministic: the same configuration always renders to the
    same text.

    Args:
        configuration: Configuration to render.
        show_impl: Draw "implements" edges for every known implementation.
        show_legend: Include the legend cluster.

    Returns:
        The configuration graph as a DOT string.

    Example:
        >>> dot = get_graphviz_string(configuration, show_impl=True)
        >>> Path("config.dot").write_text(dot)
    """
    visitor = GraphvizConfigVisitor(configuration, GraphvizOptions(show_impl=show_impl, show_legend=show_legend))
    preorder(visitor, configuration.class_hierarchy.get_namespace())
    return visitor.to_string()
