"""
Auto Import Pass for JavaScript Auto Import.
Wires scope analysis, global reference detection and import merging into one transformation.
"""

import os
from typing import Any, List, Optional
from dataclasses import dataclass, field

from autoimport.config.resolution import Resolution, ResolutionContext, ResolutionEntry, build_resolution
from .code_generator import CodeGenerator
from .global_reference_detector import GlobalReferenceDetector
from .import_merger import ORDERINGS, ImportMerger, MergeResult
from .js_parser import JSParser
from .program import Program
from .scope_analyzer import ScopeAnalyzer


class SourceSyntaxError(Exception):
    """Raised when source code handed to the pass does not parse."""
    pass


@dataclass
class PassResult:
    """Result of running the pass over one program."""
    program: Program
    entries: List[ResolutionEntry] = field(default_factory=list)
    merge: Optional[MergeResult] = None

    @property
    def changes(self) -> List[str]:
        return self.merge.changes if self.merge else []

    @property
    def modified(self) -> bool:
        return self.program.modified


class AutoImportPass:
    """Adds imports for configured identifiers a program reads as globals."""

    def __init__(self, resolution: Any, ordering: str = 'batched'):
        """
        Initialize the pass.

        Args:
            resolution: Resolution object or any configuration shape accepted
                by `build_resolution`
            ordering: 'batched' or 'interleaved' placement of synthesized imports
        """
        if ordering not in ORDERINGS:
            raise ValueError(f"Unknown import ordering '{ordering}', expected one of {', '.join(ORDERINGS)}")

        self.resolution: Resolution = build_resolution(resolution)
        self.ordering = ordering
        self.parser = JSParser()
        self.generator = CodeGenerator()

    def run(self, program: Program, filename: Optional[str] = None, cwd: Optional[str] = None) -> PassResult:
        """
        Rewrite a program's imports in place.

        Args:
            program: Parsed program to rewrite
            filename: Path of the file the program came from, if any
            cwd: Base directory handed to resolution callbacks

        Returns:
            PassResult with the resolved entries and merge outcome
        """
        scope = ScopeAnalyzer(program.root)
        context = ResolutionContext(
            filename=filename,
            cwd=cwd if cwd is not None else os.getcwd(),
            program=program
        )

        entries = GlobalReferenceDetector(scope).detect(self.resolution, context)
        merge = ImportMerger(program, scope, self.ordering).merge(entries)

        return PassResult(program=program, entries=entries, merge=merge)

    def transform_source(self, source: str, filename: Optional[str] = None, cwd: Optional[str] = None) -> str:
        """
        Transform JavaScript source code.

        Args:
            source: JavaScript module source
            filename: Path of the file the source came from, if any
            cwd: Base directory handed to resolution callbacks

        Returns:
            The transformed source, or the original when nothing changed

        Raises:
            SourceSyntaxError: If the source does not parse
        """
        parse_result = self.parser.parse_source(source)
        if not parse_result.success:
            raise SourceSyntaxError(parse_result.error_message)

        program = Program(parse_result)
        self.run(program, filename, cwd)
        return self.generator.generate(program)


def transform_source(source: str, resolution: Any, filename: Optional[str] = None,
                     cwd: Optional[str] = None, ordering: str = 'batched') -> str:
    """Transform JavaScript source with a one-off pass."""
    return AutoImportPass(resolution, ordering).transform_source(source, filename, cwd)
