import pytest

from kaori_compiler.compiler.analysis import (
    ExpressionShape,
    accepts_helper,
    classify_shape,
    needs_getter_wrapping,
)
from kaori_compiler.compiler.js_nodes import (
    ArrayExpression,
    BooleanLiteral,
    CallExpression,
    Identifier,
    StringLiteral,
    TaggedTemplate,
)
from kaori_compiler.compiler.parser import KaoriParser


def expression(source: str):
    """Parse ``source`` as the right-hand side of an assignment."""
    module = KaoriParser().parse(f"x = {source};", "test.js")
    statement = module.root.named_children[0]
    assignment = statement.named_children[0]
    return assignment.child_by_field_name("right")


@pytest.mark.parametrize(
    "source, shape",
    [
        ("{ a: 1 }", ExpressionShape.OBJECT),
        ("[1, 2]", ExpressionShape.ARRAY),
        ("value", ExpressionShape.IDENTIFIER),
        ("a.b", ExpressionShape.MEMBER),
        ("a[0]", ExpressionShape.MEMBER),
        ("f()", ExpressionShape.CALL),
        ("css`x`", ExpressionShape.TAGGED_TEMPLATE),
        ("a ? b : c", ExpressionShape.CONDITIONAL),
        ("a && b", ExpressionShape.LOGICAL),
        ("a ?? b", ExpressionShape.LOGICAL),
        ("a + b", ExpressionShape.OTHER),
        ("() => 1", ExpressionShape.FUNCTION),
        ("function () {}", ExpressionShape.FUNCTION),
        ('"s"', ExpressionShape.LITERAL),
        ("42", ExpressionShape.LITERAL),
        ("(a.b)", ExpressionShape.MEMBER),
    ],
)
def test_classify_shape(source, shape):
    assert classify_shape(expression(source)) == shape


def test_helper_shapes():
    assert accepts_helper(expression("{ color: c }"))
    assert accepts_helper(expression("cond ? a : b"))
    assert not accepts_helper(expression('"color: red"'))
    assert not accepts_helper(expression("`a ${b}`"))


@pytest.mark.parametrize(
    "source, wrapped",
    [
        ("count", False),
        ("123", False),
        ("state.count", True),
        ("getData()", True),
        ("new Date()", True),
        ("() => state.count", False),
        ("function () { return a.b; }", False),
        ("[fallback, 1, () => a.b]", False),
        ("[user.name]", True),
        ("cond ? a : b", False),
        ("cond ? a.b : c", True),
        ("ok && load()", True),
        ("{ value: item.value }", True),
        ("{ onClick: () => a.b() }", False),
        ("`${a}`", False),
        ("`${a.b}`", True),
    ],
)
def test_needs_getter_wrapping(source, wrapped):
    assert needs_getter_wrapping(expression(source)) is wrapped


def test_compiled_values():
    html = Identifier("html")
    assert not needs_getter_wrapping(StringLiteral("x"))
    assert not needs_getter_wrapping(BooleanLiteral(True))
    assert not needs_getter_wrapping(TaggedTemplate(html, ["<b>x</b>"], []))
    assert needs_getter_wrapping(CallExpression(Identifier("component"), []))
    assert needs_getter_wrapping(
        TaggedTemplate(html, ["", ""], [CallExpression(Identifier("f"), [])])
    )
    assert not needs_getter_wrapping(ArrayExpression([StringLiteral("a")]))
