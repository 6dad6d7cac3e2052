"""
Code Generator for JavaScript Auto Import.
Prints a rewritten program by splicing its import statements into the original source.
"""

import re
from typing import List, Tuple

from tree_sitter import Node

from autoimport.utils.ts_utils import TreeSitterHelper
from .program import ImportDeclaration, Program, SourceStatement


LEADING_BLANK_LINES = re.compile(rb'\A(?:[ \t]*\r?\n)+')


class CodeGenerator:
    """Generates JavaScript source for a Program, preserving non-import text."""

    def generate(self, program: Program) -> str:
        """
        Print a program after its body has been rewritten.

        Non-import text is copied from the original source byte for byte.
        Imports at the head of the body are printed as a block at the top of
        the file; imports placed before a later statement are printed on the
        line before it.

        Args:
            program: Program whose body was rewritten

        Returns:
            The transformed source code
        """
        if not program.modified:
            return program.source_code

        source = program.source_bytes
        newline = b'\r\n' if b'\r\n' in source else b'\n'

        head, placed = self._split_body(program)

        edits: List[Tuple[int, int, bytes]] = []
        for node in program.removed_nodes:
            start, end = self._removal_range(source, node)
            edits.append((start, end, b''))
        for anchor, declarations in placed:
            position, prefix = self._insertion_point(source, anchor.start_byte)
            text = newline.join(self._render(d, newline) for d in declarations)
            edits.append((position, position, prefix + text + newline))

        body = self._apply_edits(source, edits)

        if not head:
            return body.decode('utf-8')

        preamble = b''
        first = program.body[0] if program.body else None
        if isinstance(first, SourceStatement) and first.node.type == 'hash_bang_line':
            preamble = body[:first.end_byte] + newline
            body = body[first.end_byte:]

        imports = newline.join(self._render(d, newline) for d in head)
        rest = LEADING_BLANK_LINES.sub(b'', body)

        if not rest.strip():
            return (preamble + imports + newline).decode('utf-8')

        return (preamble + imports + newline + newline + rest).decode('utf-8')

    @staticmethod
    def _render(declaration: ImportDeclaration, newline: bytes) -> bytes:
        """Render an import, keeping the original text of untouched source imports."""
        if declaration.node is not None and not declaration.dirty:
            text = TreeSitterHelper.node_text(declaration.node).rstrip()
            if not text.endswith(';'):
                text += ';'
            return text.encode('utf-8')

        return declaration.render().encode('utf-8').replace(b'\n', newline)

    @staticmethod
    def _split_body(program: Program):
        """
        Separate the leading import block from imports anchored to later statements.

        Returns:
            Tuple of (leading imports, [(anchor statement, imports before it)])
        """
        head: List[ImportDeclaration] = []
        placed = []
        pending: List[ImportDeclaration] = []
        leading = True

        for statement in program.body:
            if isinstance(statement, ImportDeclaration):
                if leading:
                    head.append(statement)
                else:
                    pending.append(statement)
                continue

            if statement.node.type == 'hash_bang_line' and not head:
                continue

            leading = False
            if pending:
                placed.append((statement, pending))
                pending = []

        # imports after the last statement stay at the end of the block
        head.extend(pending)
        return head, placed

    @staticmethod
    def _removal_range(source: bytes, node: Node) -> Tuple[int, int]:
        """Get the byte range to delete for a node, including its line when it stands alone."""
        start, end = node.start_byte, node.end_byte

        line_start = source.rfind(b'\n', 0, start) + 1
        line_end = source.find(b'\n', end)
        if line_end == -1:
            line_end = len(source)

        if source[line_start:start].strip() or source[end:line_end].strip():
            return start, end

        return line_start, min(line_end + 1, len(source))

    @staticmethod
    def _insertion_point(source: bytes, start: int) -> Tuple[int, bytes]:
        """Get where to insert text before a statement and the indentation to repeat."""
        line_start = source.rfind(b'\n', 0, start) + 1
        indent = source[line_start:start]
        if indent.strip():
            return start, b''
        return line_start, indent

    @staticmethod
    def _apply_edits(source: bytes, edits: List[Tuple[int, int, bytes]]) -> bytes:
        result = source
        for start, end, text in sorted(edits, key=lambda edit: (edit[0], edit[1]), reverse=True):
            result = result[:start] + text + result[end:]
        return result
