"""
Global Reference Detector for JavaScript Auto Import.
Finds configured identifiers that a program reads as free globals.
"""

from typing import List, Optional, Set

from autoimport.config.resolution import Resolution, ResolutionContext, ResolutionEntry
from .binding_classifier import BoundNames
from .interfaces import ScopeQuery


class GlobalReferenceDetector:
    """Pairs free global references with the imports configured for them."""

    def __init__(self, scope_query: ScopeQuery):
        """
        Initialize the detector.

        Args:
            scope_query: Binding index of the program being transformed
        """
        self.scope_query = scope_query
        self._self_assigned: Optional[Set[str]] = None

    @property
    def self_assigned(self) -> Set[str]:
        """Get the names the program assigns without a local binding."""
        if self._self_assigned is None:
            self._self_assigned = self.find_self_assigned_globals()
        return self._self_assigned

    def find_self_assigned_globals(self) -> Set[str]:
        """
        Collect every name written to as a global assignment target.

        Every assignment in the program is examined, so a write anywhere
        excludes the name everywhere.

        Returns:
            Set of self-assigned global names
        """
        names = set()

        for assignment in self.scope_query.iter_assignments():
            target = assignment.child_by_field_name('left')
            if target is None:
                continue
            for name in BoundNames(target):
                if not self.scope_query.has_binding(name, assignment):
                    names.add(name)

        return names

    def is_eligible(self, identifier: str) -> bool:
        """
        Check if an identifier should be satisfied by an import.

        Args:
            identifier: Configured identifier

        Returns:
            True if it is read as a free global and never self-assigned
        """
        return self.scope_query.has_global(identifier) and identifier not in self.self_assigned

    def detect(self, resolution: Resolution, context: ResolutionContext) -> List[ResolutionEntry]:
        """
        Resolve the imports needed by the program.

        Args:
            resolution: Configured identifier to import mapping
            context: Information about the program, handed to callbacks

        Returns:
            Entries of eligible identifiers, in configuration order
        """
        # force the whole-program scan before any candidate is checked
        self.self_assigned

        return [entry for entry in resolution.entries(context) if self.is_eligible(entry.identifier)]
