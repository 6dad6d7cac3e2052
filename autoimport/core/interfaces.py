"""
Capability interfaces for JavaScript Auto Import.
The import synthesis components only talk to the syntax tree through these.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterator, List, Optional


class ScopeQuery(ABC):
    """Answers binding questions about one parsed program."""

    @abstractmethod
    def has_binding(self, name: str, node: Any) -> bool:
        """
        Check if a name has a local binding visible at a node.

        Args:
            name: Identifier name to look up
            node: Node whose enclosing scope chain is searched

        Returns:
            True if the name resolves to a local binding, False if it is global
        """
        pass

    @abstractmethod
    def has_global(self, name: str) -> bool:
        """
        Check if a name is referenced anywhere in the program as a free global.

        Args:
            name: Identifier name to check

        Returns:
            True if at least one reference resolves to no binding
        """
        pass

    @abstractmethod
    def iter_assignments(self) -> Iterator[Any]:
        """
        Iterate over every assignment expression in the program.

        Yields:
            Assignment expression nodes, each with a `left` target
        """
        pass

    def first_global_reference(self, name: str) -> Optional[Any]:
        """
        Get the first free global reference to a name, in source order.

        Returns:
            Reference node, or None if the name is not a free global
        """
        return None


class TreeBuilder(ABC):
    """Builds and places import statements in a program's top-level body."""

    @abstractmethod
    def build_import(self, specifiers: List[Any], origin: str) -> Any:
        """
        Build a new import statement.

        Args:
            specifiers: Initial bindings of the statement (may be empty)
            origin: Module string the statement imports from

        Returns:
            The new import statement, not yet placed in the body
        """
        pass

    @abstractmethod
    def remove_statement(self, statement: Any) -> None:
        """Remove a statement from the top-level body."""
        pass

    @abstractmethod
    def prepend_statements(self, statements: List[Any]) -> None:
        """Place statements at the top of the body, keeping their order."""
        pass

    @abstractmethod
    def insert_before(self, anchor: Any, statement: Any) -> None:
        """
        Place a statement directly before another top-level statement.

        Args:
            anchor: Statement already in the body
            statement: Statement to insert
        """
        pass
