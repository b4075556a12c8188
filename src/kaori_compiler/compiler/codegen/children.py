"""Child lists lowered to template pieces or to expression lists."""

import html
from typing import TYPE_CHECKING, List

from kaori_compiler.compiler.ast_nodes import (
    ComponentNode,
    ElementNode,
    ExpressionNode,
    FragmentNode,
    MarkupNode,
    TextNode,
)
from kaori_compiler.compiler.codegen.template import Piece, TemplateBuilder, keep_text
from kaori_compiler.compiler.js_nodes import (
    ArrayExpression,
    ComponentCall,
    JsNode,
    StringLiteral,
)

if TYPE_CHECKING:
    from kaori_compiler.compiler.codegen.generator import MarkupCompiler


class ChildrenAggregator:
    """Shared by the element and component compilers.

    ``template_pieces`` feeds an open template (markup element children).
    ``expressions`` produces one output expression per child for component
    children and fragments. Fragments never add a nesting level.
    """

    def __init__(self, compiler: "MarkupCompiler") -> None:
        self.compiler = compiler

    def keep_text(self, text: str) -> bool:
        return keep_text(text, self.compiler.options.keep_inline_whitespace)

    def template_pieces(self, children: List[MarkupNode]) -> List[Piece]:
        pieces: List[Piece] = []
        for child in children:
            if isinstance(child, TextNode):
                if self.keep_text(child.text):
                    pieces.append(child.text)
            elif isinstance(child, ExpressionNode):
                pieces.append(self.compiler.expression(child.expr))
            elif isinstance(child, ComponentNode):
                pieces.append(self.compiler.components.compile(child))
            elif isinstance(child, ElementNode):
                pieces.extend(self.compiler.templates.inline_child(child))
            elif isinstance(child, FragmentNode):
                pieces.extend(self.template_pieces(child.children))
        return pieces

    def expressions(self, children: List[MarkupNode]) -> List[JsNode]:
        items: List[JsNode] = []
        for child in children:
            if isinstance(child, TextNode):
                text = child.text.strip()
                if text:
                    items.append(StringLiteral(html.unescape(text)))
            elif isinstance(child, ExpressionNode):
                items.append(self.compiler.expression(child.expr))
            elif isinstance(child, FragmentNode):
                items.extend(self.expressions(child.children))
            else:
                items.append(self.compiler.compile(child))
        return items

    def children_value(self, items: List[JsNode]) -> JsNode:
        """Value of a component's ``children`` prop.

        A lone component result gets one template hole; siblings are
        passed as a plain array.
        """
        if len(items) == 1:
            item = items[0]
            if isinstance(item, ComponentCall):
                return self.wrap(item)
            return item
        return ArrayExpression(items)

    def fragment(self, fragment: FragmentNode) -> JsNode:
        items = self.expressions(fragment.children)
        if len(items) == 0:
            return TemplateBuilder().build(self.compiler.bindings.reference("html"))
        if len(items) == 1:
            return self.wrap(items[0])
        return ArrayExpression(items)

    def wrap(self, item: JsNode) -> JsNode:
        builder = TemplateBuilder().add_expression(item)
        return builder.build(self.compiler.bindings.reference("html"))
