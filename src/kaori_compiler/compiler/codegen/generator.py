"""Module-level markup compilation and output splicing."""

import html
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from tree_sitter import Node

from kaori_compiler.compiler.ast_nodes import (
    AttributeValue,
    BooleanValue,
    ComponentNode,
    ElementNode,
    ElementValue,
    ExpressionValue,
    FragmentNode,
    MarkupNode,
    StringValue,
)
from kaori_compiler.compiler.codegen.attributes import AttributeClassifier
from kaori_compiler.compiler.codegen.children import ChildrenAggregator
from kaori_compiler.compiler.codegen.component import ComponentCodegen
from kaori_compiler.compiler.codegen.template import TemplateCodegen
from kaori_compiler.compiler.diagnostics import CompileWarning, Diagnostics
from kaori_compiler.compiler.imports import BindingTable, insertion_offset
from kaori_compiler.compiler.js_nodes import (
    BooleanLiteral,
    JsNode,
    RawExpression,
    StringLiteral,
)
from kaori_compiler.compiler.parser import (
    KaoriParser,
    MarkupBuilder,
    ParsedModule,
    find_markup_roots,
)
from kaori_compiler.compiler.sourcemap import SourceMapBuilder
from kaori_compiler.config import CompilerOptions

logger = logging.getLogger(__name__)


@dataclass
class TransformResult:
    code: str
    map: Optional[Dict[str, Any]] = None
    warnings: List[CompileWarning] = field(default_factory=list)


class MarkupCompiler:
    """Compilation context for one module.

    Holds the binding table and the warning list; every codegen part
    receives it and calls back into ``compile`` and ``expression``.
    """

    def __init__(
        self,
        module: ParsedModule,
        options: CompilerOptions,
        bindings: BindingTable,
        diagnostics: Diagnostics,
    ) -> None:
        self.module = module
        self.options = options
        self.bindings = bindings
        self.diagnostics = diagnostics
        self.builder = MarkupBuilder(module)

        self.attributes = AttributeClassifier(self)
        self.templates = TemplateCodegen(self)
        self.components = ComponentCodegen(self)
        self.children = ChildrenAggregator(self)

    def compile_syntax(self, node: Node) -> JsNode:
        return self.compile(self.builder.build(node))

    def compile(self, markup: MarkupNode) -> JsNode:
        if isinstance(markup, ComponentNode):
            return self.components.compile(markup)
        if isinstance(markup, ElementNode):
            return self.templates.compile_element(markup)
        if isinstance(markup, FragmentNode):
            return self.children.fragment(markup)
        raise TypeError(f"Cannot compile {type(markup).__name__} on its own")

    def expression(self, node: Node) -> JsNode:
        """User expression with nested markup compiled in place."""
        roots = find_markup_roots(node)
        if (
            len(roots) == 1
            and roots[0].start_byte == node.start_byte
            and roots[0].end_byte == node.end_byte
        ):
            return self.compile_syntax(roots[0])

        parts: List[Union[str, JsNode]] = []
        embedded: Dict[Tuple[int, int], JsNode] = {}
        cursor = node.start_byte
        for root in roots:
            parts.append(self.module.slice(cursor, root.start_byte))
            compiled = self.compile_syntax(root)
            parts.append(compiled)
            embedded[(root.start_byte, root.end_byte)] = compiled
            cursor = root.end_byte
        parts.append(self.module.slice(cursor, node.end_byte))

        if node.type == "sequence_expression":
            parts = ["(", *parts, ")"]
        return RawExpression(parts=parts, node=node, embedded=embedded)

    def attribute_value(self, value: Optional[AttributeValue]) -> Optional[JsNode]:
        if value is None:
            return None
        if isinstance(value, StringValue):
            return StringLiteral(html.unescape(value.value))
        if isinstance(value, BooleanValue):
            return BooleanLiteral(value.value)
        if isinstance(value, ExpressionValue):
            return self.expression(value.expr)
        if isinstance(value, ElementValue):
            return self.compile(value.element)
        return None


def _splice(
    module: ParsedModule,
    edits: List[Tuple[int, int, str, bool]],
    source_map: Optional[SourceMapBuilder],
) -> str:
    """Apply (start, end, text, mapped) edits in order; source outside edits is kept."""
    parts: List[str] = []
    cursor = 0
    for start, end, text, mapped in edits:
        verbatim = module.slice(cursor, start)
        parts.append(verbatim)
        parts.append(text)
        if source_map is not None:
            source_map.add_verbatim(verbatim, *module.utf16_position(cursor))
            if mapped:
                source_map.add_generated(text, *module.utf16_position(start))
            else:
                source_map.add_unmapped(text)
        cursor = end

    tail = module.slice(cursor, len(module.source_bytes))
    parts.append(tail)
    if source_map is not None:
        source_map.add_verbatim(tail, *module.utf16_position(cursor))
    return "".join(parts)


def transform(
    source: str,
    file_path: str = "",
    options: Optional[CompilerOptions] = None,
) -> TransformResult:
    """Compile every markup tree in a module into tagged-template calls."""
    options = options or CompilerOptions()
    module = KaoriParser(options.typescript).parse(source, file_path)

    bindings = BindingTable(options.package_name, options.package_match).scan(module)
    diagnostics = Diagnostics(file_path or None)
    compiler = MarkupCompiler(module, options, bindings, diagnostics)

    roots = find_markup_roots(module.root)
    edits: List[Tuple[int, int, str, bool]] = []
    for root in roots:
        compiled = compiler.compile_syntax(root)
        edits.append((root.start_byte, root.end_byte, compiled.to_source(), True))

    import_statement = bindings.generate_import()
    if import_statement is not None:
        offset = insertion_offset(module)
        text = f"{import_statement}\n" if offset == 0 else f"\n{import_statement}"
        edits.insert(0, (offset, offset, text, False))

    logger.debug(
        "Compiled %d markup root(s) in %s", len(roots), file_path or "<source>"
    )

    source_map = None
    if options.source_maps:
        source_name = Path(file_path).name if file_path else "<source>"
        source_map = SourceMapBuilder(source_name, source)

    code = _splice(module, edits, source_map)
    return TransformResult(
        code=code,
        map=source_map.to_dict() if source_map is not None else None,
        warnings=list(diagnostics.warnings),
    )
