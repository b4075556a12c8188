"""Markup tree nodes produced by the parser.

The tree is a tagged union: every markup child is one of ``ElementNode``,
``ComponentNode``, ``FragmentNode``, ``TextNode`` or ``ExpressionNode``.
Expressions are kept as tree-sitter nodes so the code generator can copy
them verbatim and the value analyzer can inspect their shape.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from tree_sitter import Node


@dataclass
class StringValue:
    """Quoted attribute value: ``name="value"``."""

    value: str


@dataclass
class BooleanValue:
    """Bare attribute shorthand: ``<input disabled>``."""

    value: bool = True


@dataclass
class ExpressionValue:
    """Container attribute value: ``name={expr}``."""

    expr: Node


@dataclass
class ElementValue:
    """Markup used directly as an attribute value: ``name=<b />``."""

    element: "MarkupNode"


AttributeValue = Union[StringValue, BooleanValue, ExpressionValue, ElementValue]


@dataclass
class Attribute:
    name: str
    # None marks an empty container (``name={}``); such attributes are dropped.
    value: Optional[AttributeValue]
    line: int = 0
    column: int = 0

    @property
    def namespace(self) -> Optional[str]:
        if ":" in self.name:
            return self.name.split(":", 1)[0]
        return None


@dataclass
class SpreadAttribute:
    """``{...expr}`` standing in for zero or more attributes."""

    expr: Node
    line: int = 0
    column: int = 0


AnyAttribute = Union[Attribute, SpreadAttribute]


@dataclass
class TextNode:
    text: str
    line: int = 0
    column: int = 0


@dataclass
class ExpressionNode:
    """``{expr}`` used as a child."""

    expr: Node
    line: int = 0
    column: int = 0


@dataclass
class ElementNode:
    """Literal markup element understood by the renderer (lowercase tag)."""

    tag: str
    attributes: List[AnyAttribute] = field(default_factory=list)
    children: List["MarkupNode"] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class ComponentNode:
    """Component invocation (capitalised tag resolved at runtime)."""

    tag: str
    attributes: List[AnyAttribute] = field(default_factory=list)
    children: List["MarkupNode"] = field(default_factory=list)
    line: int = 0
    column: int = 0


@dataclass
class FragmentNode:
    children: List["MarkupNode"] = field(default_factory=list)
    line: int = 0
    column: int = 0


MarkupNode = Union[ElementNode, ComponentNode, FragmentNode, TextNode, ExpressionNode]


def is_component_tag(tag: str) -> bool:
    return bool(tag) and "A" <= tag[0] <= "Z"
