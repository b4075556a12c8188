"""JavaScript expression model for compiled markup.

Every node knows how to print itself into an output buffer with ``emit``.
``RawExpression`` carries user code copied verbatim from the source module,
with any markup inside it already replaced by compiled nodes.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from tree_sitter import Node

IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def is_identifier(name: str) -> bool:
    return bool(IDENTIFIER_RE.match(name))


def escape_string(s: str) -> str:
    """Escape for double-quoted JS string literals."""
    return (
        s.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def escape_template(s: str) -> str:
    """Escape static text placed inside a template literal."""
    return s.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


class JsNode:
    """Base class for output expressions."""

    def emit(self, out: List[str]) -> None:
        raise NotImplementedError

    def to_source(self) -> str:
        out: List[str] = []
        self.emit(out)
        return "".join(out)


@dataclass
class Identifier(JsNode):
    name: str

    def emit(self, out: List[str]) -> None:
        out.append(self.name)


@dataclass
class StringLiteral(JsNode):
    value: str

    def emit(self, out: List[str]) -> None:
        out.append('"')
        out.append(escape_string(self.value))
        out.append('"')


@dataclass
class BooleanLiteral(JsNode):
    value: bool = True

    def emit(self, out: List[str]) -> None:
        out.append("true" if self.value else "false")


@dataclass
class TaggedTemplate(JsNode):
    """``tag`quasi${expr}quasi```. There is always one more quasi than expression."""

    tag: JsNode
    quasis: List[str] = field(default_factory=lambda: [""])
    expressions: List[JsNode] = field(default_factory=list)

    def emit(self, out: List[str]) -> None:
        self.tag.emit(out)
        out.append("`")
        for index, quasi in enumerate(self.quasis):
            out.append(escape_template(quasi))
            if index < len(self.expressions):
                out.append("${")
                self.expressions[index].emit(out)
                out.append("}")
        out.append("`")


@dataclass
class ArrayExpression(JsNode):
    elements: List[JsNode] = field(default_factory=list)

    def emit(self, out: List[str]) -> None:
        out.append("[")
        for i, element in enumerate(self.elements):
            if i > 0:
                out.append(", ")
            element.emit(out)
        out.append("]")


@dataclass
class ObjectProperty:
    """One entry of an object literal; ``getter`` emits a zero-argument accessor."""

    key: str
    value: JsNode
    getter: bool = False

    def emit(self, out: List[str]) -> None:
        if is_identifier(self.key):
            key = self.key
        else:
            key = f'["{escape_string(self.key)}"]'

        if self.getter:
            out.append(f"get {key}() {{ return ")
            self.value.emit(out)
            out.append("; }")
        else:
            out.append(f"{key}: ")
            self.value.emit(out)


@dataclass
class ObjectExpression(JsNode):
    properties: List[ObjectProperty] = field(default_factory=list)

    def emit(self, out: List[str]) -> None:
        if not self.properties:
            out.append("{}")
            return
        out.append("{ ")
        for i, prop in enumerate(self.properties):
            if i > 0:
                out.append(", ")
            prop.emit(out)
        out.append(" }")


@dataclass
class CallExpression(JsNode):
    callee: JsNode
    args: List[JsNode] = field(default_factory=list)

    def emit(self, out: List[str]) -> None:
        self.callee.emit(out)
        out.append("(")
        for i, arg in enumerate(self.args):
            if i > 0:
                out.append(", ")
            arg.emit(out)
        out.append(")")


@dataclass
class ComponentCall(CallExpression):
    """Call to the component helper: ``component(Tag, props)``."""


@dataclass
class RawExpression(JsNode):
    """User expression copied from source.

    ``parts`` interleaves verbatim source text with compiled markup. ``node``
    is the original syntax node and ``embedded`` maps the byte range of each
    markup node inside it to its compiled form.
    """

    parts: List[Union[str, JsNode]]
    node: Optional[Node] = None
    embedded: Dict[Tuple[int, int], JsNode] = field(default_factory=dict)

    def emit(self, out: List[str]) -> None:
        for part in self.parts:
            if isinstance(part, str):
                out.append(part)
            else:
                part.emit(out)


def emit(node: JsNode) -> str:
    return node.to_source()
