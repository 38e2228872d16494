"""
Thermal property calculations for boundary types.

Provides R-value, U-value and areal heat capacity of simple and layered
boundary types, and the series combination used to lump conductances.
All results are pint quantities in SI units.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..boundary_types import BoundaryType, LayeredBoundaryType, SimpleBoundaryType
from ..units import (
    AREAL_HEAT_CAPACITY,
    HEAT_TRANSFER_COEFFICIENT,
    Q_,
    THERMAL_RESISTANCE,
    Quantity,
    infinite,
    is_infinite,
)
from .convection import STILL_AIR, convective_heat_transfer_coefficient


@dataclass
class LayerThermalProperties:
    """Thermal properties of a single layer.

    Attributes:
        material: Material name
        thickness: Layer thickness, m
        conductivity: Thermal conductivity, W/(m·K)
        r_value: Thermal resistance, m²·K/W
        heat_capacity: Heat capacity per unit area, J/(m²·K)
        following_marker: Marker right after the layer, if any
    """

    material: str
    thickness: Quantity
    conductivity: Quantity
    r_value: Quantity
    heat_capacity: Quantity
    following_marker: str | None = None


@dataclass
class BoundaryThermalProperties:
    """Thermal properties of a complete boundary type.

    Attributes:
        name: Boundary type name
        r_value: Total thermal resistance, m²·K/W (excluding films)
        r_value_with_films: Total R-value including both surface films
        u_value: Overall heat transfer coefficient, W/(m²·K) (with films)
        heat_capacity: Heat capacity per unit area, J/(m²·K)
        layers: Layer properties from the first zone to the second (empty for simple types)
        g: Solar energy transmittance (simple types only)
    """

    name: str
    r_value: Quantity
    r_value_with_films: Quantity
    u_value: Quantity
    heat_capacity: Quantity
    layers: list[LayerThermalProperties] = field(default_factory=lambda: [])
    g: Quantity | None = None


def series_conductance(*conductances: Quantity) -> Quantity:
    """Combine conductances connected in series (reciprocal of summed reciprocals).

    A zero conductance is an open circuit, so the result is zero.

    Args:
        *conductances: One or more conductances of the same dimensionality
            (W/K, or W/(m²·K) for per-area values).

    Returns:
        Equivalent conductance in the unit of the first argument.

    Raises:
        ValueError: If called without arguments.
        pint.DimensionalityError: If the arguments have different dimensionality.

    Examples:
        >>> from hometherm.units import Q_
        >>> series_conductance(*[Q_(2.0, "W / K")] * 4)
        <Quantity(0.5, 'watt / kelvin')>
    """
    if not conductances:
        msg = "series_conductance() needs at least one conductance"
        raise ValueError(msg)
    first = conductances[0]
    for c in conductances[1:]:
        c.to(first.units)
    if any(c.magnitude == 0 for c in conductances):
        return Q_(0.0, first.units)
    resistance = 1.0 / first
    for c in conductances[1:]:
        resistance = resistance + 1.0 / c
    return (1.0 / resistance).to(first.units)


def _film_resistance(wind_speed: Quantity) -> Quantity:
    """Resistance of both surface films, m²·K/W."""
    return (2.0 / convective_heat_transfer_coefficient(wind_speed)).to(THERMAL_RESISTANCE)


def calculate_r_value(
    boundary_type: BoundaryType, include_films: bool = True, wind_speed: Quantity = STILL_AIR
) -> Quantity:
    """Calculate the R-value of a boundary type.

    Simple types contribute ``1/U`` (infinite for ``U == 0``); layered types
    the sum of their layer resistances.

    Args:
        boundary_type: Simple or layered boundary type
        include_films: Whether to add the convective film on both faces (default True)
        wind_speed: Air speed used for the film coefficient

    Returns:
        Thermal resistance, m²·K/W
    """
    if isinstance(boundary_type, SimpleBoundaryType):
        if boundary_type.u.magnitude > 0:
            r_total = (1.0 / boundary_type.u).to(THERMAL_RESISTANCE)
        else:
            r_total = infinite(THERMAL_RESISTANCE)
    else:
        r_total = Q_(0.0, THERMAL_RESISTANCE)
        for layer in boundary_type.layers:
            r_total = r_total + layer.r_value

    if include_films:
        r_total = r_total + _film_resistance(wind_speed)

    return r_total


def calculate_u_value(boundary_type: BoundaryType, wind_speed: Quantity = STILL_AIR) -> Quantity:
    """Calculate the U-value of a boundary type including surface films.

    Args:
        boundary_type: Simple or layered boundary type
        wind_speed: Air speed used for the film coefficient

    Returns:
        Overall heat transfer coefficient, W/(m²·K)
    """
    r_value = calculate_r_value(boundary_type, include_films=True, wind_speed=wind_speed)
    if is_infinite(r_value):
        return Q_(0.0, HEAT_TRANSFER_COEFFICIENT)
    return (1.0 / r_value).to(HEAT_TRANSFER_COEFFICIENT)


def areal_heat_capacity(boundary_type: BoundaryType) -> Quantity:
    """Heat capacity per unit area, J/(m²·K); zero for simple types."""
    total = Q_(0.0, AREAL_HEAT_CAPACITY)
    if isinstance(boundary_type, LayeredBoundaryType):
        for layer in boundary_type.layers:
            total = total + (layer.thickness * layer.material.volumetric_heat_capacity).to(AREAL_HEAT_CAPACITY)
    return total


def get_thermal_properties(boundary_type: BoundaryType, wind_speed: Quantity = STILL_AIR) -> BoundaryThermalProperties:
    """Get complete thermal properties for a boundary type.

    Args:
        boundary_type: Simple or layered boundary type
        wind_speed: Air speed used for the film coefficient

    Returns:
        BoundaryThermalProperties with all calculated values
    """
    layers: list[LayerThermalProperties] = []
    g: Quantity | None = None

    if isinstance(boundary_type, LayeredBoundaryType):
        for layer in boundary_type.layers:
            layers.append(
                LayerThermalProperties(
                    material=layer.material.name,
                    thickness=layer.thickness,
                    conductivity=layer.material.thermal_conductivity,
                    r_value=layer.r_value,
                    heat_capacity=(layer.thickness * layer.material.volumetric_heat_capacity).to(
                        AREAL_HEAT_CAPACITY
                    ),
                    following_marker=layer.following_marker,
                )
            )
    else:
        g = boundary_type.g

    return BoundaryThermalProperties(
        name=boundary_type.name,
        r_value=calculate_r_value(boundary_type, include_films=False),
        r_value_with_films=calculate_r_value(boundary_type, include_films=True, wind_speed=wind_speed),
        u_value=calculate_u_value(boundary_type, wind_speed=wind_speed),
        heat_capacity=areal_heat_capacity(boundary_type),
        layers=layers,
        g=g,
    )
