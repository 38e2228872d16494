"""
Reference graph for tracking which boundaries use which catalog entries.

Provides O(1) lookups for:
- Which boundaries touch a given zone?
- Which boundaries use a given boundary type or material?
- Which catalog entries are never used?
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

# Kinds of names a boundary can reference
ZONE = "zone"
BOUNDARY_TYPE = "boundary_type"
MATERIAL = "material"


class ReferenceGraph:
    """
    Tracks references from boundaries to zones, boundary types and materials.

    Boundaries are identified by their index in the model's boundary tuple.
    The graph maintains two indexes:
    - _referenced_by: (kind, name) -> boundary indices that reference it
    - _references: boundary index -> set of (kind, name) it references
    """

    __slots__ = ("_referenced_by", "_references")

    def __init__(self) -> None:
        self._referenced_by: dict[tuple[str, str], list[int]] = defaultdict(list)
        self._references: dict[int, set[tuple[str, str]]] = defaultdict(set)

    def register(self, boundary_index: int, kind: str, name: str) -> None:
        """
        Register that a boundary references a name.

        Registering the same reference twice has no effect.

        Args:
            boundary_index: Index of the referencing boundary
            kind: One of ``"zone"``, ``"boundary_type"`` or ``"material"``
            name: The name being referenced
        """
        key = (kind, name)
        if key in self._references[boundary_index]:
            return
        self._references[boundary_index].add(key)
        self._referenced_by[key].append(boundary_index)

    def get_referencing(self, kind: str, name: str) -> list[int]:
        """
        O(1): Get the indices of all boundaries that reference a name.

        Args:
            kind: Kind of the name
            name: The name to look up

        Returns:
            Boundary indices in registration order
        """
        return list(self._referenced_by.get((kind, name), ()))

    def get_references(self, boundary_index: int) -> set[tuple[str, str]]:
        """O(1): Get all (kind, name) pairs a boundary references."""
        return set(self._references.get(boundary_index, ()))

    def is_referenced(self, kind: str, name: str) -> bool:
        """Check if a name is referenced by any boundary."""
        return (kind, name) in self._referenced_by

    def unreferenced(self, kind: str, names: Iterable[str]) -> list[str]:
        """
        Find the names that no boundary references.

        Args:
            kind: Kind of the names
            names: Candidate names

        Returns:
            The candidates that are never referenced, in input order
        """
        return [name for name in names if not self.is_referenced(kind, name)]

    def __len__(self) -> int:
        """Return total number of references tracked."""
        return sum(len(refs) for refs in self._references.values())

    def stats(self) -> dict[str, int]:
        """Return statistics about the reference graph."""
        return {
            "total_references": len(self),
            "boundaries_with_references": len(self._references),
            "names_referenced": len(self._referenced_by),
        }
