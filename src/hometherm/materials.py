"""
Material catalog entries.

A material is a named substance with the thermal properties needed to turn
a layer of it into conduction and heat capacity. Materials are immutable
and shared by reference between every layer that names them.
"""

from __future__ import annotations

from dataclasses import dataclass

from .units import (
    DENSITY,
    Q_,
    SPECIFIC_HEAT_CAPACITY,
    THERMAL_CONDUCTIVITY,
    VOLUMETRIC_HEAT_CAPACITY,
    Quantity,
    checked,
)

AIR_NAME = "air"

# Dry air at roughly 20 °C and sea level
AIR_THERMAL_CONDUCTIVITY = Q_(0.026, THERMAL_CONDUCTIVITY)
AIR_SPECIFIC_HEAT_CAPACITY = Q_(1012.0, SPECIFIC_HEAT_CAPACITY)
AIR_DENSITY = Q_(1.199, DENSITY)


@dataclass(frozen=True, slots=True)
class Material:
    """Thermal properties of a single substance.

    Quantities are converted to SI on construction; a value of the wrong
    dimensionality raises ``pint.DimensionalityError``.

    Attributes:
        name: Catalog key of the material.
        thermal_conductivity: Thermal conductivity, W/(m·K).
        specific_heat_capacity: Specific heat capacity, J/(kg·K).
        density: Density, kg/m³.
    """

    name: str
    thermal_conductivity: Quantity
    specific_heat_capacity: Quantity
    density: Quantity

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "thermal_conductivity",
            checked(self.thermal_conductivity, THERMAL_CONDUCTIVITY, "thermal_conductivity"),
        )
        object.__setattr__(
            self,
            "specific_heat_capacity",
            checked(self.specific_heat_capacity, SPECIFIC_HEAT_CAPACITY, "specific_heat_capacity"),
        )
        object.__setattr__(self, "density", checked(self.density, DENSITY, "density"))

    @property
    def volumetric_heat_capacity(self) -> Quantity:
        """Heat capacity per unit volume, J/(m³·K)."""
        return (self.density * self.specific_heat_capacity).to(VOLUMETRIC_HEAT_CAPACITY)


def default_air() -> Material:
    """Return the built-in air material used when a model does not define one.

    Examples:
        >>> air = default_air()
        >>> air.name
        'air'
        >>> round(air.volumetric_heat_capacity.magnitude, 1)
        1213.4
    """
    return Material(
        name=AIR_NAME,
        thermal_conductivity=AIR_THERMAL_CONDUCTIVITY,
        specific_heat_capacity=AIR_SPECIFIC_HEAT_CAPACITY,
        density=AIR_DENSITY,
    )
