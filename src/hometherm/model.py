"""
Model - the validated, cross-referenced building description.

Provides:
- Read-only access to zones, boundaries and the catalogs they use
- Reference tracking for O(1) "which boundaries touch this zone" lookups
- Loading from a declarative JSON5 document
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .boundary_types import BoundaryType, LayeredBoundaryType
from .references import BOUNDARY_TYPE, MATERIAL, ZONE, ReferenceGraph
from .thermal.convection import STILL_AIR, convection_conductance
from .units import AREA, Quantity, checked

if TYPE_CHECKING:
    from .materials import Material
    from .zones import Zone


@dataclass(frozen=True, slots=True)
class Boundary:
    """A physical partition between exactly two zones.

    Attributes:
        boundary_type: Shared boundary type instance.
        zones: The two zones; layered types run from ``zones[0]`` to ``zones[1]``.
        area: Area, stored in m².
    """

    boundary_type: BoundaryType
    zones: tuple[Zone, Zone]
    area: Quantity

    def __post_init__(self) -> None:
        object.__setattr__(self, "area", checked(self.area, AREA, "area"))

    @property
    def zone_names(self) -> tuple[str, str]:
        """Names of the two zones."""
        return (self.zones[0].name, self.zones[1].name)

    @property
    def is_layered(self) -> bool:
        """Whether the boundary type has material layers."""
        return isinstance(self.boundary_type, LayeredBoundaryType)

    def convection_conductance(self, wind_speed: Quantity = STILL_AIR) -> Quantity:
        """Convective conductance of one face of the boundary, W/K."""
        return convection_conductance(self.area, wind_speed)


class Model:
    """
    Validated building model.

    Every name reference is resolved: boundaries hold the shared
    :class:`~hometherm.zones.Zone` and boundary type instances, layers hold
    the shared :class:`~hometherm.materials.Material` instances. A model is
    never modified after construction; use :func:`hometherm.load_model` or
    :meth:`Model.load` to create one from a document.

    Attributes:
        source: Path of the document the model was loaded from, if any
    """

    __slots__ = (
        "_air",
        "_boundaries",
        "_boundary_types",
        "_materials",
        "_references",
        "_zones",
        "source",
    )

    source: Path | None

    def __init__(
        self,
        zones: Mapping[str, Zone],
        boundaries: Iterable[Boundary],
        air: Material,
        materials: Mapping[str, Material] | None = None,
        boundary_types: Mapping[str, BoundaryType] | None = None,
        source: Path | str | None = None,
    ) -> None:
        self._zones = MappingProxyType(dict(zones))
        self._boundaries = tuple(boundaries)
        self._air = air
        self._materials = MappingProxyType(dict(materials) if materials is not None else {air.name: air})
        self._boundary_types = MappingProxyType(dict(boundary_types) if boundary_types is not None else {})
        self._references = self._build_references()
        self.source = Path(source) if source else None

    @classmethod
    def load(cls, filepath: Path | str) -> Model:
        """Load and validate a model document (see :func:`hometherm.loader.load_model`)."""
        from .loader import load_model

        return load_model(filepath)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Model:
        """Validate an in-memory model document (see :func:`hometherm.loader.parse_model`)."""
        from .loader import parse_model

        return parse_model(data)

    def _build_references(self) -> ReferenceGraph:
        graph = ReferenceGraph()
        for index, boundary in enumerate(self._boundaries):
            for zone in boundary.zones:
                graph.register(index, ZONE, zone.name)
            graph.register(index, BOUNDARY_TYPE, boundary.boundary_type.name)
            if isinstance(boundary.boundary_type, LayeredBoundaryType):
                for material in boundary.boundary_type.materials:
                    graph.register(index, MATERIAL, material.name)
        return graph

    # -------------------------------------------------------------------------
    # Read-only access
    # -------------------------------------------------------------------------

    @property
    def zones(self) -> Mapping[str, Zone]:
        """Zone name -> zone, reserved and synthesized zones included."""
        return self._zones

    @property
    def boundaries(self) -> tuple[Boundary, ...]:
        """All boundaries, with sub-boundaries and adjacent zones expanded."""
        return self._boundaries

    @property
    def air(self) -> Material:
        """The material filling inner zones."""
        return self._air

    @property
    def materials(self) -> Mapping[str, Material]:
        """Material name -> material, ``air`` included."""
        return self._materials

    @property
    def boundary_types(self) -> Mapping[str, BoundaryType]:
        """Boundary type name -> boundary type."""
        return self._boundary_types

    @property
    def references(self) -> ReferenceGraph:
        """The reference graph for dependency lookups."""
        return self._references

    def zone(self, name: str) -> Zone:
        """Get a zone by name.

        Raises:
            KeyError: If the model has no such zone.
        """
        try:
            return self._zones[name]
        except KeyError:
            raise KeyError(f"No zone named '{name}'") from None  # noqa: TRY003

    def inner_zones(self) -> list[Zone]:
        """Zones with a finite volume."""
        return [zone for zone in self._zones.values() if not zone.is_outer]

    def outer_zones(self) -> list[Zone]:
        """Environment zones (infinite heat capacity)."""
        return [zone for zone in self._zones.values() if zone.is_outer]

    def boundaries_of(self, zone_name: str) -> list[Boundary]:
        """All boundaries touching *zone_name*."""
        return [self._boundaries[i] for i in self._references.get_referencing(ZONE, zone_name)]

    def boundaries_using(self, boundary_type_name: str) -> list[Boundary]:
        """All boundaries of the boundary type *boundary_type_name*."""
        return [
            self._boundaries[i] for i in self._references.get_referencing(BOUNDARY_TYPE, boundary_type_name)
        ]

    def __len__(self) -> int:
        """Return the number of boundaries."""
        return len(self._boundaries)

    def __repr__(self) -> str:
        source = f", source='{self.source}'" if self.source else ""
        return f"Model(zones={len(self._zones)}, boundaries={len(self._boundaries)}{source})"
