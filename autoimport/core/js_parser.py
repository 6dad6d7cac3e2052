"""
JavaScript Parser for JavaScript Auto Import.
Handles loading and parsing JavaScript source code into tree-sitter trees.
"""

from typing import Optional
from pathlib import Path
from dataclasses import dataclass

import tree_sitter_javascript
from tree_sitter import Language, Parser, Tree

from autoimport.utils.ts_utils import TreeSitterHelper


JS_LANGUAGE = Language(tree_sitter_javascript.language())


@dataclass
class ParseResult:
    """Result of parsing a JavaScript file."""
    tree: Optional[Tree]
    source_code: str
    source_bytes: bytes
    success: bool
    error_message: Optional[str] = None


class JSParser:
    """Parses JavaScript source code into tree-sitter trees."""

    def __init__(self):
        """Initialize the JavaScript parser."""
        self.parser = Parser(JS_LANGUAGE)

    def parse_file(self, file_path: Path) -> ParseResult:
        """
        Load and parse a JavaScript file.

        Args:
            file_path: Path to the JavaScript file to parse

        Returns:
            ParseResult with parsing information
        """
        try:
            with open(file_path, 'r', encoding='utf-8', newline='') as f:
                source_code = f.read()

            return self.parse_source(source_code)

        except FileNotFoundError:
            return ParseResult(
                tree=None,
                source_code="",
                source_bytes=b"",
                success=False,
                error_message=f"File not found: {file_path}"
            )
        except UnicodeDecodeError:
            return ParseResult(
                tree=None,
                source_code="",
                source_bytes=b"",
                success=False,
                error_message=f"File encoding not supported: {file_path}"
            )

    def parse_source(self, source_code: str) -> ParseResult:
        """
        Parse JavaScript source code directly.

        Args:
            source_code: JavaScript source code as string

        Returns:
            ParseResult with parsing information
        """
        source_bytes = source_code.encode('utf-8')
        tree = self.parser.parse(source_bytes)

        error_node = TreeSitterHelper.find_first_error(tree.root_node)
        if error_node is not None:
            line, column = error_node.start_point[0] + 1, error_node.start_point[1] + 1
            kind = "missing token" if error_node.is_missing else "unexpected input"
            return ParseResult(
                tree=None,
                source_code=source_code,
                source_bytes=source_bytes,
                success=False,
                error_message=f"Syntax error in source code: {kind} at line {line}, column {column}"
            )

        return ParseResult(
            tree=tree,
            source_code=source_code,
            source_bytes=source_bytes,
            success=True
        )

