"""Custom exceptions for hometherm."""

from __future__ import annotations

from collections.abc import Sequence


class HomeThermError(Exception):
    """Base exception for all hometherm errors."""

    pass


def _zone_pair(zones: Sequence[str]) -> str:
    """Format a zone pair for error messages."""
    return " and ".join(f"'{z}'" for z in zones)


class ModelFormatError(HomeThermError):
    """Raised when the model document has the wrong shape or an invalid value."""

    def __init__(self, message: str, *, context: str | None = None) -> None:
        self.context = context
        msg = f"{context}: {message}" if context else message
        super().__init__(msg)


class DanglingReferenceError(HomeThermError):
    """Raised when an entry references a non-existent material, boundary type or zone."""

    def __init__(self, kind: str, name: str, context: str) -> None:
        self.kind = kind
        self.name = name
        self.context = context
        super().__init__(f"{context} references unknown {kind} '{name}'")


class LayerStructureError(HomeThermError):
    """Raised when the layer list of a layered boundary type is malformed."""

    def __init__(self, boundary_type: str, reason: str) -> None:
        self.boundary_type = boundary_type
        self.reason = reason
        super().__init__(f"Boundary type '{boundary_type}' {reason}")


class SubBoundaryAreaError(HomeThermError):
    """Raised when the sub-boundaries of a boundary cover more than its area."""

    def __init__(self, zones: Sequence[str], area: float, sub_area: float) -> None:
        self.zones = tuple(zones)
        self.area = area
        self.sub_area = sub_area
        super().__init__(
            f"Boundary between {_zone_pair(zones)} has less area ({area:g} m²) "
            f"than the sum of its sub-boundaries ({sub_area:g} m²)"
        )


class ReservedZoneError(HomeThermError):
    """Raised when the document defines a zone under a reserved name."""

    def __init__(self, zone: str) -> None:
        self.zone = zone
        super().__init__(f"Zone name '{zone}' is reserved and cannot be defined in the model")


class DuplicateZoneError(HomeThermError):
    """Raised when a synthesized adjacent zone collides with another zone."""

    def __init__(self, zone: str) -> None:
        self.zone = zone
        super().__init__(f"Duplicate zone with name '{zone}'")


class ModelFileNotFoundError(HomeThermError):
    """Raised when no model document can be found."""

    def __init__(self, searched_paths: list[str] | None = None) -> None:
        self.searched_paths = searched_paths or []
        msg = "Could not find a model document."
        if self.searched_paths:
            msg += "\nSearched in:\n"
            for loc in self.searched_paths:
                msg += f"  - {loc}\n"
        msg += (
            "\nTo fix this, either:\n"
            "  1. Pass an explicit path: find_model_file(path='/path/to/model.json5')\n"
            "  2. Set the HOMETHERM_MODEL environment variable to the model document\n"
            "  3. Place a model.json5 in the current directory"
        )
        super().__init__(msg)
