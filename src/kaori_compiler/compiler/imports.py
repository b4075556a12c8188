"""Support-symbol bindings for one module.

The table is filled once from the parsed module: every identifier name in
use is collected so synthesized names never collide, and existing imports
from the support package are honoured under their local aliases. Symbols
are marked needed lazily by ``reference`` while markup is compiled, and
only those end up in the generated import statement.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from tree_sitter import Node

from kaori_compiler.compiler.js_nodes import Identifier
from kaori_compiler.compiler.parser import ParsedModule

DEFAULT_PACKAGE = "kaori.js"
DEFAULT_PACKAGE_MATCH = "kaori"

# Order of specifiers in a generated import
SUPPORT_SYMBOLS = (
    "component",
    "html",
    "ref",
    "styleMap",
    "classMap",
    "mergeProps",
    "spread",
)

IDENTIFIER_TYPES = {
    "identifier",
    "property_identifier",
    "shorthand_property_identifier",
    "shorthand_property_identifier_pattern",
    "private_property_identifier",
    "statement_identifier",
    "type_identifier",
}

TAG_TYPES = {"jsx_opening_element", "jsx_closing_element", "jsx_self_closing_element"}


@dataclass
class Binding:
    symbol: str
    local: str
    exists: bool = False
    needed: bool = False


def find_free_name(base: str, taken: Set[str]) -> str:
    if base not in taken:
        return base
    counter = 1
    while f"{base}{counter}" in taken:
        counter += 1
    return f"{base}{counter}"


def collect_identifiers(module: ParsedModule) -> Set[str]:
    """All identifier names appearing in the module outside markup tag names."""
    names: Set[str] = set()
    stack = [module.root]
    while stack:
        node = stack.pop()
        if node.type in IDENTIFIER_TYPES:
            names.add(module.text(node))
            continue
        if node.type in TAG_TYPES:
            # Tag and attribute names are markup, not bindings
            for child in node.named_children:
                if child.type == "jsx_expression":
                    stack.append(child)
                elif child.type == "jsx_attribute":
                    stack.extend(child.named_children[1:])
            continue
        stack.extend(node.named_children)
    return names


def insertion_offset(module: ParsedModule) -> int:
    """Byte offset after the hashbang line and the directive prologue."""
    offset = 0
    for child in module.root.named_children:
        if child.type == "comment":
            continue
        if child.type == "hash_bang_line":
            offset = child.end_byte
            continue
        if child.type == "expression_statement":
            inner = [c for c in child.named_children if c.type != "comment"]
            if len(inner) == 1 and inner[0].type == "string":
                offset = child.end_byte
                continue
        break
    return offset


class BindingTable:
    """Maps canonical support symbols to the local names used in output."""

    def __init__(
        self,
        package_name: str = DEFAULT_PACKAGE,
        package_match: Optional[str] = DEFAULT_PACKAGE_MATCH,
    ) -> None:
        self.package_name = package_name
        self.package_match = package_match
        self.bindings: Dict[str, Binding] = {
            symbol: Binding(symbol=symbol, local=symbol) for symbol in SUPPORT_SYMBOLS
        }
        self.taken: Set[str] = set()

    def is_support_source(self, source: str) -> bool:
        if source == self.package_name:
            return True
        return bool(self.package_match) and self.package_match in source

    def scan(self, module: ParsedModule) -> "BindingTable":
        self.taken = collect_identifiers(module)

        for statement in module.root.named_children:
            if statement.type == "import_statement":
                self._scan_import(module, statement)

        for binding in self.bindings.values():
            if not binding.exists:
                binding.local = find_free_name(binding.symbol, self.taken)
        return self

    def _scan_import(self, module: ParsedModule, statement: Node) -> None:
        source = statement.child_by_field_name("source")
        if source is None or not self.is_support_source(module.text(source)[1:-1]):
            return

        for clause in statement.named_children:
            if clause.type != "import_clause":
                continue
            for group in clause.named_children:
                if group.type != "named_imports":
                    continue
                for spec in group.named_children:
                    if spec.type != "import_specifier":
                        continue
                    name = spec.child_by_field_name("name")
                    alias = spec.child_by_field_name("alias")
                    if name is None or name.type != "identifier":
                        continue
                    binding = self.bindings.get(module.text(name))
                    if binding is None:
                        continue
                    binding.local = module.text(alias if alias is not None else name)
                    binding.exists = True

    def reference(self, symbol: str) -> Identifier:
        """Mark ``symbol`` as needed and return its local identifier."""
        binding = self.bindings[symbol]
        binding.needed = True
        return Identifier(binding.local)

    def name(self, symbol: str) -> str:
        return self.bindings[symbol].local

    def pending(self) -> List[Binding]:
        return [b for b in self.bindings.values() if b.needed and not b.exists]

    def generate_import(self) -> Optional[str]:
        pending = self.pending()
        if not pending:
            return None

        specifiers = []
        for binding in pending:
            if binding.local == binding.symbol:
                specifiers.append(binding.symbol)
            else:
                specifiers.append(f"{binding.symbol} as {binding.local}")
        return f'import {{ {", ".join(specifiers)} }} from "{self.package_name}";'
