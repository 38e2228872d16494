"""
Unit registry and dimension checks.

Every physical value in hometherm is a pint :class:`Quantity` from the
registry below. Catalog entries and network elements convert what they are
given to the canonical SI unit of their field and reject anything whose
dimensionality does not match, so a length can never be passed as an area.

Example:
    >>> from hometherm.units import Q_
    >>> Q_(2, "km").to(LENGTH)
    <Quantity(2000.0, 'meter')>
"""

from __future__ import annotations

import math
from typing import Any

from pint import UnitRegistry

UNITS = UnitRegistry()
Quantity = UNITS.Quantity
Q_ = Quantity

# Canonical unit of each quantity kind
LENGTH = "m"
AREA = "m ** 2"
VOLUME = "m ** 3"
SPEED = "m / s"
DENSITY = "kg / m ** 3"
SPECIFIC_HEAT_CAPACITY = "J / (kg * K)"
THERMAL_CONDUCTIVITY = "W / (m * K)"
HEAT_TRANSFER_COEFFICIENT = "W / (m ** 2 * K)"
THERMAL_RESISTANCE = "m ** 2 * K / W"
VOLUMETRIC_HEAT_CAPACITY = "J / (m ** 3 * K)"
AREAL_HEAT_CAPACITY = "J / (m ** 2 * K)"
HEAT_CAPACITY = "J / K"
THERMAL_CONDUCTANCE = "W / K"
RATIO = "dimensionless"


def checked(value: Any, unit: str, name: str) -> Quantity:
    """Convert *value* to *unit*, requiring a quantity of the same dimensionality.

    Args:
        value: A :class:`Quantity` from :data:`UNITS`.
        unit: Canonical unit to convert to.
        name: Field name used in error messages.

    Returns:
        The value expressed in *unit*.

    Raises:
        TypeError: If *value* is not a Quantity (bare numbers carry no unit).
        pint.DimensionalityError: If *value* cannot be converted to *unit*.

    Examples:
        >>> checked(Q_(250, "mm"), LENGTH, "thickness").magnitude
        0.25
    """
    if not isinstance(value, Quantity):
        msg = f"{name} must be a Quantity convertible to '{unit}', got {type(value).__name__}"
        raise TypeError(msg)
    return value.to(unit)


def infinite(unit: str) -> Quantity:
    """An infinite quantity in *unit* (heat capacity of outer zones, resistance of U = 0)."""
    return Q_(math.inf, unit)


def is_infinite(value: Quantity) -> bool:
    """Whether the magnitude of *value* is infinite."""
    return math.isinf(value.magnitude)
