"""Expression shape classification and getter-wrapping analysis.

A single ``classify_shape`` function sorts a value into an
``ExpressionShape``. The style/classMap routing in the attribute classifier
and the getter decision for component props both consume it.
"""

from enum import Enum
from typing import Optional, Union

from tree_sitter import Node

from kaori_compiler.compiler.js_nodes import (
    ArrayExpression,
    BooleanLiteral,
    CallExpression,
    Identifier,
    JsNode,
    ObjectExpression,
    RawExpression,
    StringLiteral,
    TaggedTemplate,
)


class ExpressionShape(Enum):
    OBJECT = "object"
    ARRAY = "array"
    IDENTIFIER = "identifier"
    MEMBER = "member"
    CALL = "call"
    TAGGED_TEMPLATE = "tagged-template"
    CONDITIONAL = "conditional"
    LOGICAL = "logical"
    FUNCTION = "function"
    LITERAL = "literal"
    MARKUP = "markup"
    OTHER = "other"


# Shapes that style and classMap hand to their runtime helpers
HELPER_SHAPES = {
    ExpressionShape.OBJECT,
    ExpressionShape.IDENTIFIER,
    ExpressionShape.MEMBER,
    ExpressionShape.CALL,
    ExpressionShape.CONDITIONAL,
    ExpressionShape.LOGICAL,
}

LOGICAL_OPERATORS = {"&&", "||", "??"}

# Wrappers that do not change the value of the wrapped expression
TRANSPARENT_TYPES = {
    "parenthesized_expression",
    "as_expression",
    "satisfies_expression",
    "non_null_expression",
    "type_assertion",
}

FUNCTION_TYPES = {
    "arrow_function",
    "function_expression",
    "function",
    "generator_function",
}

LITERAL_TYPES = {
    "string",
    "template_string",
    "number",
    "true",
    "false",
    "null",
    "regex",
}

MARKUP_TYPES = {"jsx_element", "jsx_self_closing_element"}

Value = Union[Node, JsNode]


def unwrap(node: Node) -> Node:
    while node.type in TRANSPARENT_TYPES:
        inner = [c for c in node.named_children if c.type != "comment"]
        if not inner:
            break
        node = inner[0]
    return node


def is_tagged_template(node: Node) -> bool:
    if node.type != "call_expression":
        return False
    arguments = node.child_by_field_name("arguments")
    return arguments is not None and arguments.type == "template_string"


def _shape_of_syntax(node: Node) -> ExpressionShape:
    node = unwrap(node)
    kind = node.type

    if kind == "object":
        return ExpressionShape.OBJECT
    if kind == "array":
        return ExpressionShape.ARRAY
    if kind in ("identifier", "undefined"):
        return ExpressionShape.IDENTIFIER
    if kind in ("member_expression", "subscript_expression"):
        return ExpressionShape.MEMBER
    if kind == "call_expression":
        if is_tagged_template(node):
            return ExpressionShape.TAGGED_TEMPLATE
        return ExpressionShape.CALL
    if kind == "new_expression":
        return ExpressionShape.CALL
    if kind == "ternary_expression":
        return ExpressionShape.CONDITIONAL
    if kind == "binary_expression":
        operator = node.child_by_field_name("operator")
        if operator is not None and operator.type in LOGICAL_OPERATORS:
            return ExpressionShape.LOGICAL
        return ExpressionShape.OTHER
    if kind in FUNCTION_TYPES:
        return ExpressionShape.FUNCTION
    if kind in LITERAL_TYPES:
        return ExpressionShape.LITERAL
    if kind in MARKUP_TYPES:
        return ExpressionShape.MARKUP
    return ExpressionShape.OTHER


def classify_shape(value: Value) -> ExpressionShape:
    """Return the shape tag of a syntax node or compiled expression."""
    if isinstance(value, RawExpression):
        if value.node is None:
            return ExpressionShape.OTHER
        return _shape_of_syntax(value.node)
    if isinstance(value, (StringLiteral, BooleanLiteral)):
        return ExpressionShape.LITERAL
    if isinstance(value, Identifier):
        return ExpressionShape.IDENTIFIER
    if isinstance(value, TaggedTemplate):
        return ExpressionShape.TAGGED_TEMPLATE
    if isinstance(value, CallExpression):
        return ExpressionShape.CALL
    if isinstance(value, ObjectExpression):
        return ExpressionShape.OBJECT
    if isinstance(value, ArrayExpression):
        return ExpressionShape.ARRAY
    if isinstance(value, JsNode):
        return ExpressionShape.OTHER
    return _shape_of_syntax(value)


def accepts_helper(value: Value) -> bool:
    """Whether a style/classMap value is routed through its runtime helper."""
    return classify_shape(value) in HELPER_SHAPES


def needs_getter_wrapping(value: Value) -> bool:
    """Decide whether a component prop must be emitted as an accessor.

    Inline functions are values in themselves and are never wrapped. An
    array made only of literals, identifiers and functions is static.
    Anything else is dynamic as soon as a member access or call appears in
    it outside a nested function body.
    """
    shape = classify_shape(value)
    if shape == ExpressionShape.FUNCTION:
        return False

    if isinstance(value, RawExpression):
        if value.node is None:
            return False
        node = unwrap(value.node)
        if shape == ExpressionShape.ARRAY and _is_static_array(node):
            return False
        return _has_dynamic_access(node, value)

    if isinstance(value, JsNode):
        return _compiled_is_dynamic(value)

    node = unwrap(value)
    if shape == ExpressionShape.ARRAY and _is_static_array(node):
        return False
    return _has_dynamic_access(node, None)


def _is_static_array(node: Node) -> bool:
    for element in node.named_children:
        if element.type == "comment":
            continue
        if _shape_of_syntax(element) not in (
            ExpressionShape.LITERAL,
            ExpressionShape.IDENTIFIER,
            ExpressionShape.FUNCTION,
        ):
            return False
    return True


def _has_dynamic_access(node: Node, raw: Optional[RawExpression]) -> bool:
    stack = [node]
    while stack:
        current = stack.pop()
        kind = current.type

        if kind in MARKUP_TYPES:
            if raw is not None:
                compiled = raw.embedded.get((current.start_byte, current.end_byte))
                if compiled is not None and _compiled_is_dynamic(compiled):
                    return True
            continue
        if kind in ("member_expression", "subscript_expression", "new_expression"):
            return True
        if kind == "call_expression" and not is_tagged_template(current):
            return True
        if kind in FUNCTION_TYPES or kind in ("class", "class_body"):
            continue

        stack.extend(current.named_children)
    return False


def _compiled_is_dynamic(value: JsNode) -> bool:
    if isinstance(value, RawExpression):
        if value.node is None:
            return False
        return _has_dynamic_access(value.node, value)
    if isinstance(value, TaggedTemplate):
        return any(_compiled_is_dynamic(expr) for expr in value.expressions)
    if isinstance(value, CallExpression):
        return True
    if isinstance(value, ObjectExpression):
        return any(_compiled_is_dynamic(prop.value) for prop in value.properties)
    if isinstance(value, ArrayExpression):
        return any(_compiled_is_dynamic(element) for element in value.elements)
    return False
