"""Attribute routing for markup elements.

Each attribute becomes one of three pieces: static text, a named hole
(``name=${value}``) or a directive hole (`` ${value}``) that positions
itself on the element.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from kaori_compiler.compiler.analysis import accepts_helper
from kaori_compiler.compiler.ast_nodes import (
    AnyAttribute,
    Attribute,
    SpreadAttribute,
    StringValue,
)
from kaori_compiler.compiler.js_nodes import CallExpression, JsNode

if TYPE_CHECKING:
    from kaori_compiler.compiler.codegen.generator import MarkupCompiler

STATIC = "static"
DYNAMIC = "dynamic"
DIRECTIVE = "directive"

CLASS_NAMES = {"class", "className"}


@dataclass
class ClassifiedAttribute:
    kind: str
    # Static text, or the text written before the hole
    content: str
    expression: Optional[JsNode] = None


def normalize_attribute_name(name: str) -> str:
    if name in ("className", "classMap"):
        return "class"
    return name


def escape_attribute(value: str) -> str:
    return value.replace('"', "&quot;")


def has_class_conflict(attributes: List[AnyAttribute]) -> bool:
    names = {a.name for a in attributes if isinstance(a, Attribute)}
    return bool(names & CLASS_NAMES) and "classMap" in names


class AttributeClassifier:
    """Routes markup-element attributes to their wire syntax."""

    def __init__(self, compiler: "MarkupCompiler") -> None:
        self.compiler = compiler

    def classify_all(
        self, tag: str, attributes: List[AnyAttribute], line: int = 0, column: int = 0
    ) -> List[ClassifiedAttribute]:
        if has_class_conflict(attributes):
            self.compiler.diagnostics.class_conflict(tag, line, column)

        results = []
        for attribute in attributes:
            classified = self.classify(attribute)
            if classified is not None:
                results.append(classified)
        return results

    def classify(self, attribute: AnyAttribute) -> Optional[ClassifiedAttribute]:
        bindings = self.compiler.bindings

        if isinstance(attribute, SpreadAttribute):
            value = self.compiler.expression(attribute.expr)
            return self._directive(CallExpression(bindings.reference("spread"), [value]))

        name = attribute.name
        value = self.compiler.attribute_value(attribute.value)
        if value is None:
            return None

        if name == "ref":
            return self._directive(CallExpression(bindings.reference("ref"), [value]))

        is_string = isinstance(attribute.value, StringValue)

        if name == "style" and not is_string and accepts_helper(value):
            helper = CallExpression(bindings.reference("styleMap"), [value])
            return ClassifiedAttribute(DYNAMIC, " style=", helper)

        if name == "classMap" and not is_string and accepts_helper(value):
            helper = CallExpression(bindings.reference("classMap"), [value])
            return ClassifiedAttribute(DYNAMIC, " class=", helper)

        if name.startswith("on") and len(name) > 2:
            return ClassifiedAttribute(DYNAMIC, f" @{name[2:].lower()}=", value)

        namespace = attribute.namespace
        if namespace is not None:
            local = name.split(":", 1)[1]
            if namespace == "prop":
                return ClassifiedAttribute(DYNAMIC, f" .{local}=", value)
            if namespace == "bool":
                return ClassifiedAttribute(DYNAMIC, f" ?{local}=", value)
            return ClassifiedAttribute(DYNAMIC, f" {name}=", value)

        normalized = normalize_attribute_name(name)
        if is_string:
            return ClassifiedAttribute(
                STATIC, f' {normalized}="{escape_attribute(attribute.value.value)}"'
            )

        return ClassifiedAttribute(DYNAMIC, f" {normalized}=", value)

    @staticmethod
    def _directive(expression: JsNode) -> ClassifiedAttribute:
        return ClassifiedAttribute(DIRECTIVE, " ", expression)
