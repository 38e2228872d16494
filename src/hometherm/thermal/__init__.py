"""
Thermal property calculations for boundary types.

This module provides the convective film correlation used at every
air/solid interface, the series combination of conductances, and R-value,
U-value and heat capacity summaries of boundary types.

Example:
    >>> from hometherm import load_model
    >>> from hometherm.thermal import calculate_u_value
    >>>
    >>> model = load_model("house.json5")
    >>> wall = model.boundary_types["exterior_wall"]
    >>> print(f"U-value: {calculate_u_value(wall).magnitude:.2f} W/m²·K")
"""

from __future__ import annotations

from .convection import (
    STILL_AIR,
    STILL_AIR_FILM_COEFFICIENT,
    convection_conductance,
    convective_heat_transfer_coefficient,
)
from .properties import (
    BoundaryThermalProperties,
    LayerThermalProperties,
    areal_heat_capacity,
    calculate_r_value,
    calculate_u_value,
    get_thermal_properties,
    series_conductance,
)

__all__ = [
    "STILL_AIR",
    "STILL_AIR_FILM_COEFFICIENT",
    "BoundaryThermalProperties",
    "LayerThermalProperties",
    "areal_heat_capacity",
    "calculate_r_value",
    "calculate_u_value",
    "convection_conductance",
    "convective_heat_transfer_coefficient",
    "get_thermal_properties",
    "series_conductance",
]
