"""
Boundary type archetypes.

A boundary type describes how a wall, floor, ceiling or window conducts and
stores heat, independent of where it is used. Two kinds exist:

- :class:`SimpleBoundaryType` - a single lumped U-value with a solar
  transmittance and no thermal mass (typically windows and doors).
- :class:`LayeredBoundaryType` - an ordered stack of material layers
  from the first zone of a boundary towards the second. The faces and the
  interfaces between layers can carry *markers*, names that address the
  matching node of the RC network (a floor heating plane, an embedded
  temperature sensor, ...).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .materials import Material
from .units import (
    AREA,
    HEAT_CAPACITY,
    HEAT_TRANSFER_COEFFICIENT,
    LENGTH,
    Q_,
    RATIO,
    THERMAL_CONDUCTANCE,
    THERMAL_RESISTANCE,
    Quantity,
    checked,
    infinite,
)


@dataclass(frozen=True, slots=True)
class BoundaryLayer:
    """A single material layer of a layered boundary type.

    Attributes:
        material: Shared material instance.
        thickness: Layer thickness, m.
        following_marker: Marker of the interface right after this layer,
            or ``None``.
    """

    material: Material
    thickness: Quantity
    following_marker: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "thickness", checked(self.thickness, LENGTH, "thickness"))

    @property
    def r_value(self) -> Quantity:
        """Thermal resistance of the layer, m²·K/W (infinite for a perfect insulator)."""
        if self.material.thermal_conductivity.magnitude == 0:
            return infinite(THERMAL_RESISTANCE)
        return (self.thickness / self.material.thermal_conductivity).to(THERMAL_RESISTANCE)

    def heat_capacity(self, area: Quantity) -> Quantity:
        """Heat capacity of the layer over *area*, J/K."""
        area = checked(area, AREA, "area")
        return (area * self.thickness * self.material.volumetric_heat_capacity).to(HEAT_CAPACITY)

    def conductance(self, area: Quantity) -> Quantity:
        """Thermal conductance of the layer over *area*, W/K."""
        area = checked(area, AREA, "area")
        return (self.material.thermal_conductivity * area / self.thickness).to(THERMAL_CONDUCTANCE)


@dataclass(frozen=True, slots=True)
class SimpleBoundaryType:
    """Massless boundary type described by its U-value.

    Attributes:
        name: Catalog key of the boundary type.
        u: Heat transfer coefficient, W/(m²·K).
        g: Solar energy transmittance (dimensionless, 0-1).
    """

    name: str
    u: Quantity
    g: Quantity = Q_(0.0, RATIO)

    def __post_init__(self) -> None:
        object.__setattr__(self, "u", checked(self.u, HEAT_TRANSFER_COEFFICIENT, "u"))
        object.__setattr__(self, "g", checked(self.g, RATIO, "g"))


@dataclass(frozen=True, slots=True)
class LayeredBoundaryType:
    """Boundary type made of material layers.

    Attributes:
        name: Catalog key of the boundary type.
        layers: Layers ordered from the first zone to the second. Never empty.
        initial_marker: Marker of the face touching the first zone, or ``None``.
    """

    name: str
    layers: tuple[BoundaryLayer, ...]
    initial_marker: str | None = None

    @property
    def thickness(self) -> Quantity:
        """Total thickness, m."""
        total = Q_(0.0, LENGTH)
        for layer in self.layers:
            total = total + layer.thickness
        return total

    @property
    def markers(self) -> list[str]:
        """All markers from the first face to the last, in order."""
        markers = [self.initial_marker] if self.initial_marker is not None else []
        markers.extend(layer.following_marker for layer in self.layers if layer.following_marker is not None)
        return markers

    @property
    def materials(self) -> list[Material]:
        """Distinct materials used by the layers, in first-use order."""
        seen: dict[str, Material] = {}
        for layer in self.layers:
            seen.setdefault(layer.material.name, layer.material)
        return list(seen.values())


BoundaryType = Union[SimpleBoundaryType, LayeredBoundaryType]
