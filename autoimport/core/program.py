"""
Program model for JavaScript Auto Import.
Represents a module's top-level statement list and its import declarations.
"""

import json
from typing import List, Optional
from dataclasses import dataclass, field

from tree_sitter import Node

from autoimport.utils.ts_utils import TreeSitterHelper
from .interfaces import TreeBuilder
from .js_parser import ParseResult


@dataclass
class ImportSpecifier:
    """A single binding introduced by an import declaration."""
    local: str
    kind: str = 'named'  # 'default', 'namespace' or 'named'
    imported: Optional[str] = None  # exported name for 'named', defaults to local

    def render(self) -> str:
        """Render the specifier as it appears inside an import statement."""
        if self.kind == 'default':
            return self.local
        if self.kind == 'namespace':
            return f"* as {self.local}"
        if self.imported is None or self.imported == self.local:
            return self.local
        return f"{self.imported} as {self.local}"


@dataclass(eq=False)
class SourceStatement:
    """A top-level statement printed verbatim from the original source."""
    node: Node

    @property
    def start_byte(self) -> int:
        return self.node.start_byte

    @property
    def end_byte(self) -> int:
        return self.node.end_byte


@dataclass(eq=False)
class ImportDeclaration:
    """An import statement, either found in the source or synthesized."""
    origin: str
    specifiers: List[ImportSpecifier] = field(default_factory=list)
    origin_literal: Optional[str] = None
    attributes: Optional[str] = None
    node: Optional[Node] = None
    synthesized: bool = False
    dirty: bool = False

    @classmethod
    def from_node(cls, node: Node) -> 'ImportDeclaration':
        """
        Build an import declaration from an `import_statement` node.

        Args:
            node: tree-sitter `import_statement` node

        Returns:
            ImportDeclaration mirroring the node's bindings
        """
        source = node.child_by_field_name('source')
        specifiers = []
        attributes = None

        for child in node.named_children:
            if child.type == 'import_clause':
                specifiers.extend(cls._clause_specifiers(child))
            elif child.type == 'import_attribute':
                attributes = TreeSitterHelper.node_text(child)

        return cls(
            origin=TreeSitterHelper.string_value(source),
            specifiers=specifiers,
            origin_literal=TreeSitterHelper.node_text(source),
            attributes=attributes,
            node=node
        )

    @staticmethod
    def _clause_specifiers(clause: Node) -> List[ImportSpecifier]:
        specifiers = []

        for child in clause.named_children:
            if child.type == 'identifier':
                specifiers.append(ImportSpecifier(TreeSitterHelper.node_text(child), kind='default'))
            elif child.type == 'namespace_import':
                for name in child.named_children:
                    if name.type == 'identifier':
                        specifiers.append(ImportSpecifier(TreeSitterHelper.node_text(name), kind='namespace'))
            elif child.type == 'named_imports':
                for spec in child.named_children:
                    if spec.type != 'import_specifier':
                        continue
                    name = spec.child_by_field_name('name')
                    alias = spec.child_by_field_name('alias')
                    imported = TreeSitterHelper.node_text(name)
                    local = TreeSitterHelper.node_text(alias) if alias is not None else imported
                    specifiers.append(ImportSpecifier(local, kind='named', imported=imported))

        return specifiers

    @property
    def default_specifier(self) -> Optional[ImportSpecifier]:
        for specifier in self.specifiers:
            if specifier.kind == 'default':
                return specifier
        return None

    def binds(self, local: str) -> bool:
        """Check if this declaration already binds a local name."""
        return any(specifier.local == local for specifier in self.specifiers)

    def add_default(self, local: str) -> None:
        """
        Add a default binding, placed before every other specifier.

        A declaration that already has a default binding receives the new one
        as `{ default as local }`.

        Args:
            local: Local name to bind the module's default export to
        """
        if self.default_specifier is not None:
            self.add_named(local, 'default')
            return
        self.specifiers.insert(0, ImportSpecifier(local, kind='default'))
        self.dirty = True

    def add_named(self, local: str, imported: Optional[str] = None) -> None:
        """
        Append a named binding.

        Args:
            local: Local name to bind
            imported: Exported name to bind it to (defaults to local)
        """
        self.specifiers.append(ImportSpecifier(local, kind='named', imported=imported or local))
        self.dirty = True

    def absorb(self, other: 'ImportDeclaration') -> None:
        """
        Merge the bindings of another declaration for the same origin.

        Args:
            other: Declaration whose specifiers are moved onto this one
        """
        for specifier in other.specifiers:
            if self.binds(specifier.local):
                continue
            if specifier.kind == 'default':
                self.add_default(specifier.local)
            elif specifier.kind == 'namespace':
                self.specifiers.append(specifier)
                self.dirty = True
            else:
                self.add_named(specifier.local, specifier.imported)
        self.dirty = True

    def render(self) -> str:
        """
        Render the declaration as JavaScript source.

        A namespace binding cannot share a statement with named bindings, so
        such a declaration renders as two statements on consecutive lines.

        Returns:
            One or two import statements, without a trailing newline
        """
        literal = self.origin_literal or json.dumps(self.origin)
        suffix = f" {self.attributes};" if self.attributes else ";"

        default = [s.render() for s in self.specifiers if s.kind == 'default']
        namespace = [s.render() for s in self.specifiers if s.kind == 'namespace']
        named = [s.render() for s in self.specifiers if s.kind == 'named']

        if not (default or namespace or named):
            return f"import {literal}{suffix}"

        statements = []
        if namespace:
            statements.append(f"import {', '.join(default + namespace[:1])} from {literal}{suffix}")
            for extra in namespace[1:]:
                statements.append(f"import {extra} from {literal}{suffix}")
            if named:
                statements.append(f"import {{ {', '.join(named)} }} from {literal}{suffix}")
        else:
            clause = default[:]
            if named:
                clause.append(f"{{ {', '.join(named)} }}")
            statements.append(f"import {', '.join(clause)} from {literal}{suffix}")

        return "\n".join(statements)

    def describe(self) -> str:
        """Get a short human-readable description for change reports."""
        if not self.specifiers:
            return f"import \"{self.origin}\""
        return f"import {', '.join(s.render() for s in self.specifiers)} from \"{self.origin}\""


class Program(TreeBuilder):
    """Top-level statement list of one JavaScript module."""

    def __init__(self, parse_result: ParseResult):
        """
        Initialize the program from a successful parse.

        Args:
            parse_result: ParseResult holding the tree and source
        """
        if not parse_result.success or parse_result.tree is None:
            raise ValueError("Cannot build a program from a failed parse")

        self.source_code = parse_result.source_code
        self.source_bytes = parse_result.source_bytes
        self.tree = parse_result.tree
        self.root = parse_result.tree.root_node
        self.removed_nodes: List[Node] = []
        self.body: List[object] = []

        for node in self.root.named_children:
            if node.type == 'import_statement':
                self.body.append(ImportDeclaration.from_node(node))
            else:
                self.body.append(SourceStatement(node))

    @property
    def imports(self) -> List[ImportDeclaration]:
        """Get the import declarations currently in the body."""
        return [s for s in self.body if isinstance(s, ImportDeclaration)]

    @property
    def modified(self) -> bool:
        """Check if any import in the body was synthesized or extended."""
        return any(s.synthesized or s.dirty for s in self.imports)

    def build_import(self, specifiers: List[ImportSpecifier], origin: str) -> ImportDeclaration:
        return ImportDeclaration(origin=origin, specifiers=list(specifiers), synthesized=True)

    def remove_statement(self, statement: object) -> None:
        self.body.remove(statement)
        node = getattr(statement, 'node', None)
        if isinstance(statement, ImportDeclaration) and node is not None:
            self.removed_nodes.append(node)

    def prepend_statements(self, statements: List[object]) -> None:
        position = 0
        if self.body and isinstance(self.body[0], SourceStatement) and self.body[0].node.type == 'hash_bang_line':
            position = 1
        self.body[position:position] = list(statements)

    def insert_before(self, anchor: object, statement: object) -> None:
        self.body.insert(self.body.index(anchor), statement)

    def statement_containing(self, node: Node) -> Optional[SourceStatement]:
        """
        Find the top-level source statement that contains a node.

        Args:
            node: Node inside the program

        Returns:
            The enclosing SourceStatement, or None
        """
        top = TreeSitterHelper.top_level_ancestor(node)
        if top is None:
            return None

        for statement in self.body:
            if isinstance(statement, SourceStatement) and TreeSitterHelper.same_node(statement.node, top):
                return statement
        return None
