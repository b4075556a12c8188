"""Component invocations compiled to ``component(Tag, props)`` calls."""

from typing import TYPE_CHECKING, List, Optional

from kaori_compiler.compiler.analysis import needs_getter_wrapping
from kaori_compiler.compiler.ast_nodes import Attribute, ComponentNode, SpreadAttribute
from kaori_compiler.compiler.codegen.attributes import has_class_conflict
from kaori_compiler.compiler.js_nodes import (
    CallExpression,
    ComponentCall,
    Identifier,
    JsNode,
    ObjectExpression,
    ObjectProperty,
)

if TYPE_CHECKING:
    from kaori_compiler.compiler.codegen.generator import MarkupCompiler


class ComponentCodegen:
    def __init__(self, compiler: "MarkupCompiler") -> None:
        self.compiler = compiler

    def compile(self, node: ComponentNode) -> ComponentCall:
        compiler = self.compiler
        if has_class_conflict(node.attributes):
            compiler.diagnostics.class_conflict(node.tag, node.line, node.column)

        items = compiler.children.expressions(node.children)
        attributes = node.attributes
        if items and any(
            isinstance(a, Attribute) and a.name == "children" for a in attributes
        ):
            compiler.diagnostics.children_conflict(node.tag, node.line, node.column)
            attributes = [
                a
                for a in attributes
                if not (isinstance(a, Attribute) and a.name == "children")
            ]

        children: Optional[ObjectProperty] = None
        if items:
            value = compiler.children.children_value(items)
            children = ObjectProperty("children", value, needs_getter_wrapping(value))

        props = self.props(attributes, children)
        return ComponentCall(
            compiler.bindings.reference("component"), [Identifier(node.tag), props]
        )

    def props(self, attributes: List, children: Optional[ObjectProperty]) -> JsNode:
        """Build the props value: object literal, passthrough or merge call."""
        # Malformed attributes (``name={}``) contribute nothing
        attributes = [
            a for a in attributes if isinstance(a, SpreadAttribute) or a.value is not None
        ]
        spreads = [a for a in attributes if isinstance(a, SpreadAttribute)]

        if not spreads:
            properties = [p for p in map(self.property, attributes) if p is not None]
            if children is not None:
                properties.append(children)
            return ObjectExpression(properties)

        if len(attributes) == 1 and children is None:
            return self.compiler.expression(spreads[0].expr)

        args: List[JsNode] = []
        pending: List[ObjectProperty] = []
        for attribute in attributes:
            if isinstance(attribute, SpreadAttribute):
                if pending:
                    args.append(ObjectExpression(pending))
                    pending = []
                args.append(self.compiler.expression(attribute.expr))
                continue
            prop = self.property(attribute)
            if prop is not None:
                pending.append(prop)

        if children is not None:
            pending.append(children)
        if pending:
            args.append(ObjectExpression(pending))

        return CallExpression(self.compiler.bindings.reference("mergeProps"), args)

    def property(self, attribute: Attribute) -> Optional[ObjectProperty]:
        value = self.compiler.attribute_value(attribute.value)
        if value is None:
            return None
        return ObjectProperty(attribute.name, value, needs_getter_wrapping(value))
