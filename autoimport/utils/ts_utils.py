"""
Tree-sitter utility functions for JavaScript Auto Import.
Provides helper functions for working with tree-sitter syntax trees.
"""

import re
from typing import Iterator, Optional, Tuple

from tree_sitter import Node


ESCAPE_SEQUENCE = re.compile(
    r'\\(?:u\{([0-9a-fA-F]+)\}|u([0-9a-fA-F]{4})|x([0-9a-fA-F]{2})|(\r\n|[\r\n\u2028\u2029])|(.))',
    re.DOTALL
)
SINGLE_CHARACTER_ESCAPES = {'b': '\b', 'f': '\f', 'n': '\n', 'r': '\r', 't': '\t', 'v': '\v', '0': '\0'}


class TreeSitterHelper:
    """Helper class for tree-sitter node operations."""

    @staticmethod
    def node_text(node: Node) -> str:
        """
        Get the source text covered by a node.

        Args:
            node: Node to read

        Returns:
            Decoded source text of the node
        """
        return node.text.decode('utf-8')

    @staticmethod
    def node_key(node: Node) -> Tuple[int, int, str]:
        """
        Get a hashable key identifying a node within one tree.

        Args:
            node: Node to identify

        Returns:
            Tuple of (start_byte, end_byte, node type)
        """
        return (node.start_byte, node.end_byte, node.type)

    @staticmethod
    def same_node(first: Optional[Node], second: Optional[Node]) -> bool:
        """Check if two nodes denote the same position in the same tree."""
        if first is None or second is None:
            return False
        return TreeSitterHelper.node_key(first) == TreeSitterHelper.node_key(second)

    @staticmethod
    def walk(node: Node) -> Iterator[Node]:
        """
        Iterate over a node and all of its descendants in document order.

        Args:
            node: Root of the walk

        Yields:
            Every node of the subtree, named or not
        """
        cursor = node.walk()
        visited_children = False

        while True:
            if not visited_children:
                yield cursor.node
                if cursor.goto_first_child():
                    continue
            if cursor.goto_next_sibling():
                visited_children = False
            elif cursor.goto_parent():
                visited_children = True
            else:
                return

    @staticmethod
    def find_first_error(node: Node) -> Optional[Node]:
        """
        Find the first ERROR or missing node in a tree.

        Args:
            node: Root of the search

        Returns:
            The first erroneous node, or None if the tree is clean
        """
        if not node.has_error:
            return None

        for current in TreeSitterHelper.walk(node):
            if current.is_error or current.is_missing:
                return current

        return None

    @staticmethod
    def top_level_ancestor(node: Node) -> Optional[Node]:
        """
        Get the ancestor of a node that is a direct child of the program.

        Args:
            node: Node somewhere inside a program

        Returns:
            The top-level statement containing the node, or None for the root
        """
        current = node
        while current.parent is not None:
            if current.parent.type == 'program':
                return current
            current = current.parent
        return None

    @staticmethod
    def string_value(node: Node) -> str:
        """
        Get the value of a string literal node.

        Escape sequences are decoded, so different spellings of one string
        give the same value.

        Args:
            node: A `string` node

        Returns:
            The string the literal denotes
        """
        text = TreeSitterHelper.node_text(node)
        if len(text) >= 2 and text[0] in '"\'' and text[-1] == text[0]:
            text = text[1:-1]
        return ESCAPE_SEQUENCE.sub(TreeSitterHelper._decode_escape, text)

    @staticmethod
    def _decode_escape(match: re.Match) -> str:
        code = match.group(1) or match.group(2) or match.group(3)
        if code:
            return chr(int(code, 16))
        if match.group(4):
            # line continuation
            return ''
        char = match.group(5)
        return SINGLE_CHARACTER_ESCAPES.get(char, char)
