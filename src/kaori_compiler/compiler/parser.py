"""Module parser: tree-sitter syntax tree plus markup tree lowering."""

from bisect import bisect_right
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from kaori_compiler.compiler.ast_nodes import (
    AnyAttribute,
    Attribute,
    AttributeValue,
    BooleanValue,
    ComponentNode,
    ElementNode,
    ElementValue,
    ExpressionNode,
    ExpressionValue,
    FragmentNode,
    MarkupNode,
    SpreadAttribute,
    StringValue,
    TextNode,
    is_component_tag,
)
from kaori_compiler.compiler.exceptions import KaoriSyntaxError

JAVASCRIPT = Language(tree_sitter_javascript.language())
TYPESCRIPT = Language(tree_sitter_typescript.language_typescript())
TSX = Language(tree_sitter_typescript.language_tsx())

TYPESCRIPT_SUFFIXES = {".ts", ".mts", ".cts"}

# Syntax nodes that start a markup tree
MARKUP_TYPES = {"jsx_element", "jsx_self_closing_element"}
# Structural children of an element; everything between them is text
CHILD_TYPES = MARKUP_TYPES | {"jsx_expression"}


def language_for(file_path: str, typescript: Optional[bool] = None) -> Language:
    suffix = Path(file_path).suffix.lower() if file_path else ""
    if suffix in TYPESCRIPT_SUFFIXES and typescript is not False:
        return TYPESCRIPT
    if typescript is None:
        return TSX if suffix == ".tsx" else JAVASCRIPT
    return TSX if typescript else JAVASCRIPT


def find_markup_roots(node: Node) -> List[Node]:
    """Return the outermost markup nodes inside ``node`` in source order."""
    roots: List[Node] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in MARKUP_TYPES:
            roots.append(current)
            continue
        stack.extend(reversed(current.children))
    return roots


def significant_children(node: Node) -> List[Node]:
    """Named children without comments."""
    return [c for c in node.named_children if c.type != "comment"]


@dataclass
class ParsedModule:
    """One parsed source module."""

    source: str
    source_bytes: bytes
    tree: Tree
    file_path: str = ""
    _line_starts: List[int] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        starts = [0]
        for index, byte in enumerate(self.source_bytes):
            if byte == 0x0A:
                starts.append(index + 1)
        self._line_starts = starts

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def slice(self, start: int, end: int) -> str:
        return self.source_bytes[start:end].decode("utf-8")

    def text(self, node: Node) -> str:
        return self.slice(node.start_byte, node.end_byte)

    def position(self, offset: int) -> Tuple[int, int]:
        """Zero-based (line, character column) of a byte offset."""
        line = bisect_right(self._line_starts, offset) - 1
        line_start = self._line_starts[line]
        column = len(self.source_bytes[line_start:offset].decode("utf-8", errors="replace"))
        return line, column

    def utf16_position(self, offset: int) -> Tuple[int, int]:
        """Zero-based (line, UTF-16 column) as counted by source map consumers."""
        line = bisect_right(self._line_starts, offset) - 1
        prefix = self.source_bytes[self._line_starts[line] : offset].decode(
            "utf-8", errors="replace"
        )
        return line, len(prefix.encode("utf-16-le")) // 2

    def location(self, offset: int) -> Tuple[int, int]:
        """One-based (line, column) for diagnostics."""
        line, column = self.position(offset)
        return line + 1, column + 1


class KaoriParser:
    """Parses JavaScript/TypeScript modules containing markup."""

    def __init__(self, typescript: Optional[bool] = None) -> None:
        self.typescript = typescript

    def parse_file(self, file_path: Path) -> ParsedModule:
        """Parse a source file from disk."""
        with open(file_path, "r", encoding="utf-8") as f:
            content = f.read()

        return self.parse(content, str(file_path))

    def parse(self, content: str, file_path: str = "") -> ParsedModule:
        source_bytes = content.encode("utf-8")
        parser = Parser(language_for(file_path, self.typescript))
        tree = parser.parse(source_bytes)
        module = ParsedModule(
            source=content, source_bytes=source_bytes, tree=tree, file_path=file_path
        )

        if tree.root_node.has_error:
            bad = self._first_error(tree.root_node)
            line, column = module.location(bad.start_byte)
            if bad.is_missing:
                message = f"Missing '{bad.type}'"
            else:
                snippet = module.text(bad).strip().splitlines()
                near = snippet[0][:40] if snippet else ""
                message = f"Unexpected syntax near {near!r}" if near else "Unexpected syntax"
            raise KaoriSyntaxError(message, file_path=file_path, line=line, column=column)

        return module

    def _first_error(self, node: Node) -> Node:
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type == "ERROR" or current.is_missing:
                return current
            stack.extend(
                reversed([c for c in current.children if c.has_error or c.is_missing])
            )
        return node


class MarkupBuilder:
    """Lowers markup syntax nodes into the markup tree."""

    def __init__(self, module: ParsedModule) -> None:
        self.module = module
        self._cache: Dict[Tuple[int, int], MarkupNode] = {}

    def build(self, node: Node) -> MarkupNode:
        key = (node.start_byte, node.end_byte)
        if key not in self._cache:
            self._cache[key] = self._build(node)
        return self._cache[key]

    def _build(self, node: Node) -> MarkupNode:
        line, column = self.module.location(node.start_byte)

        if node.type == "jsx_self_closing_element":
            tag = self._tag_name(node)
            return self._element(tag, self._attributes(node), [], line, column)

        if node.type != "jsx_element":
            raise ValueError(f"Not a markup node: {node.type}")

        open_tag = self._child_of_type(node, "jsx_opening_element")
        close_tag = self._child_of_type(node, "jsx_closing_element")
        children = list(self._children(node, open_tag, close_tag))

        if open_tag is None or self._tag_node(open_tag) is None:
            return FragmentNode(children=children, line=line, column=column)

        tag = self._tag_name(open_tag)
        return self._element(tag, self._attributes(open_tag), children, line, column)

    def _element(
        self,
        tag: str,
        attributes: List[AnyAttribute],
        children: List[MarkupNode],
        line: int,
        column: int,
    ) -> MarkupNode:
        if is_component_tag(tag):
            return ComponentNode(
                tag=tag, attributes=attributes, children=children, line=line, column=column
            )
        return ElementNode(
            tag=tag, attributes=attributes, children=children, line=line, column=column
        )

    @staticmethod
    def _child_of_type(node: Node, node_type: str) -> Optional[Node]:
        for child in node.children:
            if child.type == node_type:
                return child
        return None

    @staticmethod
    def _tag_node(tag: Node) -> Optional[Node]:
        for child in significant_children(tag):
            if child.type not in ("jsx_attribute", "jsx_expression"):
                return child
        return None

    def _tag_name(self, tag: Node) -> str:
        name = self._tag_node(tag)
        if name is None:
            return ""
        return "".join(self.module.text(name).split())

    def _children(
        self, node: Node, open_tag: Optional[Node], close_tag: Optional[Node]
    ) -> Iterator[MarkupNode]:
        cursor = open_tag.end_byte if open_tag is not None else node.start_byte
        end = close_tag.start_byte if close_tag is not None else node.end_byte

        for child in node.named_children:
            if child.type not in CHILD_TYPES:
                continue
            if child.start_byte > cursor:
                yield self._text(cursor, child.start_byte)

            if child.type == "jsx_expression":
                expr = self._container_expression(child)
                # Empty containers and spread children are dropped
                if expr is not None and expr.type != "spread_element":
                    line, column = self.module.location(child.start_byte)
                    yield ExpressionNode(expr=expr, line=line, column=column)
            else:
                yield self.build(child)
            cursor = child.end_byte

        if end > cursor:
            yield self._text(cursor, end)

    def _text(self, start: int, end: int) -> TextNode:
        line, column = self.module.location(start)
        return TextNode(text=self.module.slice(start, end), line=line, column=column)

    @staticmethod
    def _container_expression(container: Node) -> Optional[Node]:
        inner = significant_children(container)
        return inner[0] if inner else None

    def _attributes(self, tag: Node) -> List[AnyAttribute]:
        attributes: List[AnyAttribute] = []
        for child in tag.named_children:
            line, column = self.module.location(child.start_byte)
            if child.type == "jsx_attribute":
                attributes.append(self._attribute(child, line, column))
            elif child.type == "jsx_expression":
                inner = self._container_expression(child)
                if inner is None or inner.type != "spread_element":
                    continue
                argument = significant_children(inner)
                if argument:
                    attributes.append(
                        SpreadAttribute(expr=argument[0], line=line, column=column)
                    )
        return attributes

    def _attribute(self, node: Node, line: int, column: int) -> Attribute:
        parts = significant_children(node)
        name = "".join(self.module.text(parts[0]).split())
        value: Optional[AttributeValue] = None

        if len(parts) == 1:
            value = BooleanValue()
        else:
            value_node = parts[1]
            if value_node.type == "string":
                value = StringValue(self.module.text(value_node)[1:-1])
            elif value_node.type == "jsx_expression":
                expr = self._container_expression(value_node)
                if expr is not None and expr.type != "spread_element":
                    value = ExpressionValue(expr)
            elif value_node.type in MARKUP_TYPES:
                value = ElementValue(self.build(value_node))

        return Attribute(name=name, value=value, line=line, column=column)
