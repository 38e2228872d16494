"""Thermal zones."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .units import HEAT_CAPACITY, VOLUME, Quantity, checked, infinite

if TYPE_CHECKING:
    from .materials import Material

# Environment zones every model has; the document may not define them
RESERVED_ZONE_NAMES: tuple[str, ...] = ("outside", "ground")

# Joins a zone name and an adjacent zone suffix ("bathroom/ceiling_cavity")
ADJACENT_ZONE_SEPARATOR = "/"


@dataclass(frozen=True, slots=True)
class Zone:
    """A named thermal space.

    Inner zones have a finite air volume. Outer zones (``volume is None``)
    are environments with infinite heat capacity whose temperature is an
    input, never a result.

    Attributes:
        name: Unique zone name.
        volume: Air volume, m³, or ``None`` for an outer zone.
    """

    name: str
    volume: Quantity | None = None

    def __post_init__(self) -> None:
        if self.volume is not None:
            object.__setattr__(self, "volume", checked(self.volume, VOLUME, "volume"))

    @property
    def is_outer(self) -> bool:
        """Whether this zone is an environment with infinite heat capacity."""
        return self.volume is None

    def heat_capacity(self, air: Material) -> Quantity:
        """Heat capacity of the zone air, J/K (infinite for outer zones).

        Examples:
            >>> from hometherm.materials import default_air
            >>> from hometherm.units import Q_
            >>> Zone("attic").heat_capacity(default_air()).magnitude
            inf
            >>> Zone("closet", volume=Q_(0.0, "m ** 3")).heat_capacity(default_air()).magnitude
            0.0
        """
        if self.volume is None:
            return infinite(HEAT_CAPACITY)
        return (self.volume * air.volumetric_heat_capacity).to(HEAT_CAPACITY)


def adjacent_zone_name(parent: str, suffix: str) -> str:
    """Name of the zone synthesized for *suffix* next to *parent*.

    Examples:
        >>> adjacent_zone_name("bathroom", "ceiling_cavity")
        'bathroom/ceiling_cavity'
    """
    return f"{parent}{ADJACENT_ZONE_SEPARATOR}{suffix}"
