"""
Convective heat transfer at air/solid interfaces.

The film coefficient follows the empirical wind-speed correlation

    h = 12.12 - 1.16·v + 11.6·√v    [W/(m²·K)]

with *v* the air speed in m/s along the surface. Networks are currently
built at a single wind speed (still air by default); the controller owns
any per-step variation.
"""

from __future__ import annotations

import math

from ..units import AREA, HEAT_TRANSFER_COEFFICIENT, Q_, SPEED, THERMAL_CONDUCTANCE, Quantity, checked

__all__ = [
    "STILL_AIR",
    "STILL_AIR_FILM_COEFFICIENT",
    "convection_conductance",
    "convective_heat_transfer_coefficient",
]

STILL_AIR = Q_(0.0, SPEED)


def convective_heat_transfer_coefficient(wind_speed: Quantity = STILL_AIR) -> Quantity:
    """Film coefficient of a surface, W/(m²·K).

    Args:
        wind_speed: Air speed along the surface.

    Returns:
        Convective heat transfer coefficient.

    Raises:
        ValueError: If *wind_speed* is negative.

    Examples:
        >>> convective_heat_transfer_coefficient().magnitude
        12.12
    """
    v = checked(wind_speed, SPEED, "wind_speed").magnitude
    if v < 0:
        msg = f"Wind speed must be non-negative, got {wind_speed}"
        raise ValueError(msg)
    return Q_(12.12 - 1.16 * v + 11.6 * math.sqrt(v), HEAT_TRANSFER_COEFFICIENT)


# Film coefficient at v = 0
STILL_AIR_FILM_COEFFICIENT: Quantity = convective_heat_transfer_coefficient(STILL_AIR)


def convection_conductance(area: Quantity, wind_speed: Quantity = STILL_AIR) -> Quantity:
    """Convective conductance of a surface of *area*, W/K."""
    area = checked(area, AREA, "area")
    return (convective_heat_transfer_coefficient(wind_speed) * area).to(THERMAL_CONDUCTANCE)
