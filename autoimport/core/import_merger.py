"""
Import Merger for JavaScript Auto Import.
Turns resolved import entries into import declarations merged by origin.
"""

from typing import Dict, List, Optional, Set
from dataclasses import dataclass, field

from autoimport.config.resolution import (
    DefaultImport,
    NamedImport,
    ResolutionEntry,
    SideEffectImport,
)
from .interfaces import ScopeQuery
from .program import ImportDeclaration, Program


ORDERINGS = ('batched', 'interleaved')


@dataclass
class MergeResult:
    """Outcome of merging resolved imports into a program."""
    implicit: List[ImportDeclaration] = field(default_factory=list)
    explicit: List[ImportDeclaration] = field(default_factory=list)
    changes: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class ImportMerger:
    """Merges resolved imports with the imports already in a program."""

    def __init__(self, program: Program, scope_query: Optional[ScopeQuery] = None,
                 ordering: str = 'batched'):
        """
        Initialize the merger for one program.

        Args:
            program: Program whose top-level body is rewritten
            scope_query: Binding index, needed to place interleaved imports
            ordering: 'batched' or 'interleaved'
        """
        if ordering not in ORDERINGS:
            raise ValueError(f"Unknown import ordering '{ordering}', expected one of {', '.join(ORDERINGS)}")

        self.program = program
        self.scope_query = scope_query
        self.ordering = ordering

        self.implicit: Dict[str, ImportDeclaration] = {}
        self.explicit: Dict[str, ImportDeclaration] = {}
        self._bound_locals: Set[str] = set()
        self._requested_by: Dict[str, List[str]] = {}

    def merge(self, entries: List[ResolutionEntry]) -> MergeResult:
        """
        Apply resolved entries and rewrite the program's import prefix.

        Args:
            entries: Resolved (identifier, spec) pairs in order

        Returns:
            MergeResult describing the import declarations and changes
        """
        result = MergeResult()

        self._capture_explicit_imports(result)

        for entry in entries:
            self._apply(entry, result)

        self._place_imports()

        result.implicit = list(self.implicit.values())
        result.explicit = list(self.explicit.values())

        for declaration in result.implicit:
            result.changes.append(f"Added {declaration.describe()}")
        for declaration in result.explicit:
            if declaration.dirty:
                result.changes.append(f"Extended {declaration.describe()}")

        return result

    def _capture_explicit_imports(self, result: MergeResult) -> None:
        """Remove every import from the body, filing it by origin."""
        for statement in list(self.program.body):
            if not isinstance(statement, ImportDeclaration):
                continue

            self.program.remove_statement(statement)
            existing = self.explicit.get(statement.origin)
            if existing is None:
                self.explicit[statement.origin] = statement
            else:
                existing.absorb(statement)
                result.skipped.append(f"Merged duplicate import of \"{statement.origin}\"")

            for specifier in statement.specifiers:
                self._bound_locals.add(specifier.local)

    def _destination(self, origin: str) -> ImportDeclaration:
        declaration = self.implicit.get(origin)
        if declaration is None:
            declaration = self.explicit.get(origin)
        if declaration is None:
            declaration = self.program.build_import([], origin)
            self.implicit[origin] = declaration
        return declaration

    def _apply(self, entry: ResolutionEntry, result: MergeResult) -> None:
        spec = entry.spec

        if isinstance(spec, SideEffectImport):
            self._destination(spec.origin)
            self._requested_by.setdefault(spec.origin, []).append(entry.identifier)
            return

        if entry.identifier in self._bound_locals:
            result.skipped.append(f"'{entry.identifier}' is already bound, ignoring import from \"{spec.origin}\"")
            return

        declaration = self._destination(spec.origin)

        if isinstance(spec, DefaultImport):
            declaration.add_default(entry.identifier)
        elif isinstance(spec, NamedImport):
            declaration.add_named(entry.identifier, spec.exported_name(entry.identifier))
        self._bound_locals.add(entry.identifier)

    def _place_imports(self) -> None:
        """Put implicit then explicit declarations back into the body."""
        batched = list(self.implicit.values())
        deferred = []

        if self.ordering == 'interleaved' and self.scope_query is not None:
            batched = []
            for declaration in self.implicit.values():
                anchor = self._first_consumer(declaration) if not declaration.specifiers else None
                if anchor is None:
                    batched.append(declaration)
                else:
                    deferred.append((anchor, declaration))

        self.program.prepend_statements(batched + list(self.explicit.values()))

        for anchor, declaration in deferred:
            self.program.insert_before(anchor, declaration)

    def _first_consumer(self, declaration: ImportDeclaration):
        """Find the first top-level statement reading an identifier that requested a side-effect import."""
        references = []
        for identifier in self._requested_by.get(declaration.origin, []):
            node = self.scope_query.first_global_reference(identifier)
            if node is not None:
                references.append(node)

        if not references:
            return None

        first = min(references, key=lambda node: node.start_byte)
        return self.program.statement_containing(first)
