"""Markup elements compiled to ``html`` tagged templates."""

from typing import TYPE_CHECKING, List, Union

from kaori_compiler.compiler.ast_nodes import (
    Attribute,
    BooleanValue,
    ElementNode,
    ExpressionValue,
    StringValue,
    TextNode,
)
from kaori_compiler.compiler.codegen.attributes import (
    STATIC,
    escape_attribute,
    normalize_attribute_name,
)
from kaori_compiler.compiler.js_nodes import JsNode, TaggedTemplate

if TYPE_CHECKING:
    from kaori_compiler.compiler.codegen.generator import MarkupCompiler

# A template piece is either static markup text or a hole
Piece = Union[str, JsNode]

VOID_TAGS = {
    "area",
    "base",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
}


def is_void_tag(tag: str) -> bool:
    return tag.lower() in VOID_TAGS


class TemplateBuilder:
    """Accumulates static text and holes; quasis always outnumber holes by one."""

    def __init__(self) -> None:
        self.quasis: List[str] = [""]
        self.expressions: List[JsNode] = []

    def add_static(self, text: str) -> "TemplateBuilder":
        self.quasis[-1] += text
        return self

    def add_expression(self, expr: JsNode) -> "TemplateBuilder":
        self.expressions.append(expr)
        self.quasis.append("")
        return self

    def extend(self, pieces: List[Piece]) -> "TemplateBuilder":
        for piece in pieces:
            if isinstance(piece, str):
                self.add_static(piece)
            else:
                self.add_expression(piece)
        return self

    def is_empty(self) -> bool:
        return self.quasis == [""] and not self.expressions

    def build(self, tag: JsNode) -> TaggedTemplate:
        return TaggedTemplate(tag=tag, quasis=list(self.quasis), expressions=list(self.expressions))


def _literal_attribute(attribute: Attribute) -> bool:
    value = attribute.value
    if value is None or isinstance(value, (StringValue, BooleanValue)):
        return True
    if isinstance(value, ExpressionValue):
        return value.expr.type in ("true", "false")
    return False


def can_inline_static(element: ElementNode) -> bool:
    """Whether the element and its whole subtree are plain literal markup."""
    for attribute in element.attributes:
        if not isinstance(attribute, Attribute) or not _literal_attribute(attribute):
            return False

    for child in element.children:
        if isinstance(child, TextNode):
            continue
        if isinstance(child, ElementNode) and can_inline_static(child):
            continue
        return False
    return True


def keep_text(text: str, keep_inline_whitespace: bool = True) -> bool:
    """Whitespace-only text with a line break is layout and never rendered."""
    if text.strip():
        return True
    if "\n" in text:
        return False
    return keep_inline_whitespace


def static_html(element: ElementNode, keep_inline_whitespace: bool = True) -> str:
    """Flatten a statically inlineable element into markup text."""
    html = f"<{element.tag}"
    for attribute in element.attributes:
        name = normalize_attribute_name(attribute.name)
        value = attribute.value
        if isinstance(value, StringValue):
            html += f' {name}="{escape_attribute(value.value)}"'
        elif isinstance(value, BooleanValue) and value.value:
            html += f" {name}"
        elif isinstance(value, ExpressionValue) and value.expr.type == "true":
            html += f" {name}"

    if is_void_tag(element.tag):
        return html + " />"

    html += ">"
    for child in element.children:
        if isinstance(child, TextNode):
            if keep_text(child.text, keep_inline_whitespace):
                html += child.text
        else:
            html += static_html(child, keep_inline_whitespace)
    return html + f"</{element.tag}>"


class TemplateCodegen:
    """Builds tagged templates for lowercase elements."""

    def __init__(self, compiler: "MarkupCompiler") -> None:
        self.compiler = compiler

    def compile_element(self, element: ElementNode) -> TaggedTemplate:
        builder = TemplateBuilder().extend(self.element_pieces(element))
        return builder.build(self.compiler.bindings.reference("html"))

    def element_pieces(self, element: ElementNode) -> List[Piece]:
        """Opening tag, attributes, children and closing tag as template pieces."""
        pieces: List[Piece] = [f"<{element.tag}"]

        classified = self.compiler.attributes.classify_all(
            element.tag, element.attributes, element.line, element.column
        )
        for attribute in classified:
            pieces.append(attribute.content)
            if attribute.kind != STATIC:
                pieces.append(attribute.expression)

        if is_void_tag(element.tag):
            pieces.append(" />")
            return pieces

        pieces.append(">")
        pieces.extend(self.compiler.children.template_pieces(element.children))
        pieces.append(f"</{element.tag}>")
        return pieces

    def inline_child(self, element: ElementNode) -> List[Piece]:
        """Pieces for an element nested inside an open template."""
        if can_inline_static(element):
            return [static_html(element, self.compiler.options.keep_inline_whitespace)]
        return self.element_pieces(element)
