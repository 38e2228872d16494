"""
Model loader - parses declarative model documents into a validated Model.

The document is JSON5 (JSON plus comments, unquoted keys and trailing
commas) with four top-level catalogs::

    {
        materials: {name: {thermal_conductivity, specific_heat_capacity, density}},
        boundary_types: {name: {u, g} | {layers: [{material, thickness} | {marker}]}},
        zones: {name: {volume, adjacent_zones?} | null},
        boundaries: [{boundary_type, zones: [a, b], area, sub_boundaries?}],
    }

Physical values are numbers in SI base units (m, m², m³, W/(m·K), ...) or
strings with an explicit unit such as ``"30 cm"``, which are converted.
A unit of the wrong dimensionality is a format error.

Loading is all-or-nothing: every name reference is resolved and every
structural rule is checked, and the first problem raises a
:class:`~hometherm.exceptions.HomeThermError` subclass naming the
offending entry.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any, cast

import json5
from pint.errors import DimensionalityError, PintError

from .boundary_types import BoundaryLayer, BoundaryType, LayeredBoundaryType, SimpleBoundaryType
from .exceptions import (
    DanglingReferenceError,
    DuplicateZoneError,
    LayerStructureError,
    ModelFormatError,
    ReservedZoneError,
    SubBoundaryAreaError,
)
from .materials import AIR_NAME, Material, default_air
from .model import Boundary, Model
from .references import BOUNDARY_TYPE, MATERIAL, ZONE
from .units import (
    AREA,
    DENSITY,
    HEAT_TRANSFER_COEFFICIENT,
    LENGTH,
    Q_,
    RATIO,
    SPECIFIC_HEAT_CAPACITY,
    THERMAL_CONDUCTIVITY,
    VOLUME,
    Quantity,
)
from .zones import RESERVED_ZONE_NAMES, Zone, adjacent_zone_name

logger = logging.getLogger(__name__)

_TOP_LEVEL_KEYS = ("materials", "boundary_types", "zones", "boundaries")

# Relative slack when comparing sub-boundary areas with the parent area
_AREA_RTOL = 1e-9


def load_model(filepath: Path | str) -> Model:
    """
    Load a model document from disk and validate it.

    Args:
        filepath: Path to the JSON5 model document

    Returns:
        Validated Model

    Raises:
        FileNotFoundError: If the file does not exist
        ModelFormatError: If the file is not valid UTF-8 JSON5 or has the wrong shape
        HomeThermError: If any reference or structural rule is violated

    Examples:
        Load a house and list its heated zones::

            from hometherm import load_model

            model = load_model("house.json5")
            for zone in model.inner_zones():
                print(zone.name, zone.volume)
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"Model file not found: {filepath}")  # noqa: TRY003

    data = load_document(filepath)
    model = ModelParser(data, source=filepath).parse()
    logger.info(
        "Loaded model from %s: %d zones, %d boundaries",
        filepath,
        len(model.zones),
        len(model.boundaries),
    )
    return model


def load_document(filepath: Path | str) -> dict[str, Any]:
    """
    Load the raw model document without validating it.

    Raises:
        ModelFormatError: If the file is not valid UTF-8 or not valid JSON5
    """
    filepath = Path(filepath)
    with open(filepath, encoding="utf-8") as f:
        try:
            return json5.load(f)
        except ValueError as e:
            # UnicodeDecodeError is a ValueError too
            raise ModelFormatError(str(e), context=f"Model file {filepath}") from e


def parse_model(data: Mapping[str, Any], *, source: Path | str | None = None) -> Model:
    """
    Validate an in-memory model document.

    Args:
        data: Document as produced by :func:`load_document`
        source: Optional path recorded on the model

    Returns:
        Validated Model

    Examples:
        >>> model = parse_model({
        ...     "zones": {"room": {"volume": 30}},
        ...     "boundary_types": {"window": {"u": 1.1, "g": 0.6}},
        ...     "boundaries": [{"boundary_type": "window", "zones": ["room", "outside"], "area": 2}],
        ... })
        >>> list(model.zones)
        ['outside', 'ground', 'room']
        >>> model.boundaries[0].zone_names
        ('room', 'outside')
        >>> model.boundaries[0].area
        <Quantity(2.0, 'meter ** 2')>
    """
    return ModelParser(data, source=source).parse()


class ModelParser:
    """
    Parser turning a raw model document into a :class:`Model`.

    Catalogs are resolved leaves first: materials, then boundary types
    (which reference materials), then zones (whose adjacent zone shorthand
    references boundary types), then boundaries.
    """

    __slots__ = ("_data", "_source")

    def __init__(self, data: Mapping[str, Any], source: Path | str | None = None) -> None:
        self._data = data
        self._source = source

    def parse(self) -> Model:
        """
        Parse and validate the whole document.

        Returns:
            Validated Model
        """
        if not isinstance(self._data, Mapping):
            raise ModelFormatError("Model document must be a JSON object")

        data = cast(Mapping[str, Any], self._data)
        for key in data:
            if key not in _TOP_LEVEL_KEYS:
                logger.warning("Ignoring unknown top-level key '%s' in model document", key)

        materials = self._parse_materials(_section(data, "materials", dict))
        boundary_types = self._parse_boundary_types(_section(data, "boundary_types", dict), materials)
        zones, boundaries = self._parse_zones(_section(data, "zones", dict), boundary_types)
        boundaries.extend(self._parse_boundaries(_section(data, "boundaries", list), zones, boundary_types))

        model = Model(
            zones=zones,
            boundaries=boundaries,
            air=materials[AIR_NAME],
            materials=materials,
            boundary_types=boundary_types,
            source=self._source,
        )
        _warn_unreferenced(model)
        return model

    # -------------------------------------------------------------------------
    # Materials
    # -------------------------------------------------------------------------

    def _parse_materials(self, raw: Mapping[str, Any]) -> dict[str, Material]:
        materials: dict[str, Material] = {}
        for name, entry in raw.items():
            context = f"Material '{name}'"
            entry = _mapping(entry, context)
            materials[name] = Material(
                name=name,
                thermal_conductivity=_quantity(entry, "thermal_conductivity", context, THERMAL_CONDUCTIVITY),
                specific_heat_capacity=_quantity(entry, "specific_heat_capacity", context, SPECIFIC_HEAT_CAPACITY),
                density=_quantity(entry, "density", context, DENSITY),
            )

        if AIR_NAME not in materials:
            logger.debug("Model defines no '%s' material, using reference values", AIR_NAME)
            materials[AIR_NAME] = default_air()

        return materials

    # -------------------------------------------------------------------------
    # Boundary types
    # -------------------------------------------------------------------------

    def _parse_boundary_types(
        self, raw: Mapping[str, Any], materials: Mapping[str, Material]
    ) -> dict[str, BoundaryType]:
        boundary_types: dict[str, BoundaryType] = {}
        for name, entry in raw.items():
            context = f"Boundary type '{name}'"
            entry = _mapping(entry, context)
            has_layers = "layers" in entry
            has_u = "u" in entry

            if has_layers and has_u:
                raise ModelFormatError("must define either 'layers' or 'u', not both", context=context)
            if has_layers:
                boundary_types[name] = self._parse_layered(name, entry["layers"], materials)
            elif has_u:
                g = _quantity(entry, "g", context, RATIO) if "g" in entry else Q_(0.0, RATIO)
                if g.magnitude > 1:
                    raise ModelFormatError(f"'g' must be between 0 and 1, got {g.magnitude}", context=context)
                u = _quantity(entry, "u", context, HEAT_TRANSFER_COEFFICIENT)
                boundary_types[name] = SimpleBoundaryType(name=name, u=u, g=g)
            else:
                raise ModelFormatError("must define either 'layers' or 'u'", context=context)

        return boundary_types

    def _parse_layered(self, name: str, raw_layers: Any, materials: Mapping[str, Material]) -> LayeredBoundaryType:
        context = f"Boundary type '{name}'"
        if not isinstance(raw_layers, list):
            raise ModelFormatError("'layers' must be a list", context=context)
        if not raw_layers:
            raise LayerStructureError(name, "has empty layer list")

        initial_marker: str | None = None
        layers: list[BoundaryLayer] = []
        previous_marker: str | None = None

        for item in cast(list[Any], raw_layers):
            item = _mapping(item, context)
            if "marker" in item:
                if len(item) != 1:
                    raise ModelFormatError("a marker item must not have other keys", context=context)
                marker = item["marker"]
                if not isinstance(marker, str) or not marker:
                    raise ModelFormatError("markers must be non-empty strings", context=context)
                if previous_marker is not None:
                    raise LayerStructureError(
                        name, f"has two markers in succession ('{previous_marker}', '{marker}')"
                    )
                if layers:
                    layers[-1] = replace(layers[-1], following_marker=marker)
                else:
                    initial_marker = marker
                previous_marker = marker
                continue

            material_name = item.get("material")
            if not isinstance(material_name, str):
                raise ModelFormatError("each layer needs a 'material' name or a 'marker'", context=context)
            material = materials.get(material_name)
            if material is None:
                raise DanglingReferenceError("material", material_name, context)
            thickness = _quantity(item, "thickness", context, LENGTH, positive=True)
            layers.append(BoundaryLayer(material=material, thickness=thickness))
            previous_marker = None

        if not layers:
            raise LayerStructureError(name, "has only markers and no material layers")

        return LayeredBoundaryType(name=name, layers=tuple(layers), initial_marker=initial_marker)

    # -------------------------------------------------------------------------
    # Zones
    # -------------------------------------------------------------------------

    def _parse_zones(
        self, raw: Mapping[str, Any], boundary_types: Mapping[str, BoundaryType]
    ) -> tuple[dict[str, Zone], list[Boundary]]:
        """Parse zones, expanding the adjacent zone shorthand.

        Returns:
            Tuple of (zone name -> zone, boundaries to the adjacent zones)
        """
        for name in RESERVED_ZONE_NAMES:
            if name in raw:
                raise ReservedZoneError(name)

        zones: dict[str, Zone] = {name: Zone(name=name) for name in RESERVED_ZONE_NAMES}
        logger.debug("Injected reserved outer zones: %s", ", ".join(RESERVED_ZONE_NAMES))
        boundaries: list[Boundary] = []

        # Adjacent zone names may collide with zones declared later
        declared = set(raw)

        for name, entry in raw.items():
            context = f"Zone '{name}'"
            entry = {} if entry is None else _mapping(entry, context)
            volume = _quantity(entry, "volume", context, VOLUME) if entry.get("volume") is not None else None
            zone = Zone(name=name, volume=volume)
            if name in zones:
                raise DuplicateZoneError(name)
            zones[name] = zone

            adjacent_zones = _list(entry.get("adjacent_zones", []), f"{context} 'adjacent_zones'")
            if adjacent_zones and zone.is_outer:
                raise ModelFormatError("only inner zones (with a 'volume') can have adjacent zones", context=context)

            for adjacent in adjacent_zones:
                adjacent = _mapping(adjacent, f"{context} adjacent zone")
                suffix = adjacent.get("suffix")
                if not isinstance(suffix, str) or not suffix:
                    raise ModelFormatError("adjacent zones need a non-empty 'suffix'", context=context)
                adj_name = adjacent_zone_name(name, suffix)
                if adj_name in zones or adj_name in declared:
                    raise DuplicateZoneError(adj_name)
                adj_zone = Zone(name=adj_name, volume=Q_(0.0, VOLUME))
                zones[adj_name] = adj_zone

                pair_context = _pair_context((name, adj_name))
                adj_type = _lookup_boundary_type(boundary_types, adjacent.get("boundary_type"), pair_context)
                boundaries.append(
                    Boundary(
                        boundary_type=adj_type,
                        zones=(zone, adj_zone),
                        area=_quantity(adjacent, "area", pair_context, AREA),
                    )
                )
                logger.debug("Expanded adjacent zone '%s'", adj_name)

        return zones, boundaries

    # -------------------------------------------------------------------------
    # Boundaries
    # -------------------------------------------------------------------------

    def _parse_boundaries(
        self,
        raw: list[Any],
        zones: Mapping[str, Zone],
        boundary_types: Mapping[str, BoundaryType],
    ) -> list[Boundary]:
        boundaries: list[Boundary] = []
        for position, entry in enumerate(raw):
            entry = _mapping(entry, f"Boundary #{position}")
            zone_names = entry.get("zones")
            if (
                not isinstance(zone_names, list)
                or len(zone_names) != 2
                or not all(isinstance(z, str) for z in zone_names)
            ):
                raise ModelFormatError("'zones' must be a list of two zone names", context=f"Boundary #{position}")
            if zone_names[0] == zone_names[1]:
                raise ModelFormatError(
                    f"must connect two different zones, got '{zone_names[0]}' twice", context=f"Boundary #{position}"
                )

            context = _pair_context(zone_names)
            zone_pair = (_lookup_zone(zones, zone_names[0], context), _lookup_zone(zones, zone_names[1], context))
            boundary_type = _lookup_boundary_type(boundary_types, entry.get("boundary_type"), context)
            area = _quantity(entry, "area", context, AREA).magnitude

            remaining_area = area
            for sub_entry in _list(entry.get("sub_boundaries", []), f"{context} 'sub_boundaries'"):
                sub_entry = _mapping(sub_entry, f"{context} sub-boundary")
                sub_area = _quantity(sub_entry, "area", context, AREA).magnitude
                if sub_area > remaining_area and not math.isclose(sub_area, remaining_area, rel_tol=_AREA_RTOL):
                    raise SubBoundaryAreaError(zone_names, area, area - remaining_area + sub_area)
                remaining_area = max(remaining_area - sub_area, 0.0)
                boundaries.append(
                    Boundary(
                        boundary_type=_lookup_boundary_type(boundary_types, sub_entry.get("boundary_type"), context),
                        zones=zone_pair,
                        area=Q_(sub_area, AREA),
                    )
                )
                logger.debug("Expanded sub-boundary of %s with %g m²", context, sub_area)

            boundaries.append(Boundary(boundary_type=boundary_type, zones=zone_pair, area=Q_(remaining_area, AREA)))

        return boundaries


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _pair_context(zone_names: list[str] | tuple[str, str]) -> str:
    return f"Boundary between '{zone_names[0]}' and '{zone_names[1]}'"


def _section(data: Mapping[str, Any], key: str, expected: type) -> Any:
    """Get a top-level catalog, treating a missing or null catalog as empty."""
    value = data.get(key)
    if value is None:
        return expected()
    if expected is dict and not isinstance(value, Mapping):
        raise ModelFormatError(f"'{key}' must be an object")
    if expected is list and not isinstance(value, list):
        raise ModelFormatError(f"'{key}' must be a list")
    return value


def _mapping(value: Any, context: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ModelFormatError(f"expected an object, got {type(value).__name__}", context=context)
    return cast(Mapping[str, Any], value)


def _list(value: Any, context: str) -> list[Any]:
    if not isinstance(value, list):
        raise ModelFormatError(f"expected a list, got {type(value).__name__}", context=context)
    return cast(list[Any], value)


def _quantity(entry: Mapping[str, Any], key: str, context: str, unit: str, *, positive: bool = False) -> Quantity:
    """Read a non-negative (or strictly positive) finite quantity from *entry*.

    Numbers are taken in *unit*. Strings such as ``"30 cm"`` are parsed by
    pint and converted to *unit*.
    """
    if key not in entry:
        raise ModelFormatError(f"missing required field '{key}'", context=context)
    value = entry[key]
    if isinstance(value, str):
        magnitude = _to_float(_parse_quantity(value, key, context, unit), key, context)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        magnitude = _to_float(value, key, context)
    else:
        raise ModelFormatError(f"'{key}' must be a number or a quantity string, got {value!r}", context=context)
    if not math.isfinite(magnitude):
        raise ModelFormatError(f"'{key}' must be finite, got {value!r}", context=context)
    if magnitude < 0 or (positive and magnitude == 0):
        bound = "positive" if positive else "non-negative"
        raise ModelFormatError(f"'{key}' must be {bound}, got {value!r}", context=context)
    return Q_(magnitude, unit)


def _parse_quantity(text: str, key: str, context: str, unit: str) -> Any:
    """Parse a quantity string and return its magnitude in *unit*."""
    try:
        parsed = Q_(text)
    except (PintError, AttributeError, SyntaxError, TypeError, ValueError) as e:
        raise ModelFormatError(f"'{key}' is not a valid quantity: {text!r}", context=context) from e
    try:
        return parsed.to(unit).magnitude
    except DimensionalityError as e:
        raise ModelFormatError(
            f"'{key}' has incompatible units: {text!r} cannot be converted to '{unit}'", context=context
        ) from e


def _to_float(value: Any, key: str, context: str) -> float:
    try:
        return float(value)
    except OverflowError:
        raise ModelFormatError(f"'{key}' is too large to be represented as a float", context=context) from None
    except (TypeError, ValueError) as e:
        raise ModelFormatError(f"'{key}' must be a real number, got {value!r}", context=context) from e


def _lookup_zone(zones: Mapping[str, Zone], name: str, context: str) -> Zone:
    zone = zones.get(name)
    if zone is None:
        raise DanglingReferenceError("zone", name, context)
    return zone


def _lookup_boundary_type(boundary_types: Mapping[str, BoundaryType], name: Any, context: str) -> BoundaryType:
    if not isinstance(name, str):
        raise ModelFormatError("'boundary_type' must be a boundary type name", context=context)
    boundary_type = boundary_types.get(name)
    if boundary_type is None:
        raise DanglingReferenceError("boundary type", name, context)
    return boundary_type


def _warn_unreferenced(model: Model) -> None:
    """Log catalog entries that no boundary uses."""
    graph = model.references
    for name in graph.unreferenced(MATERIAL, model.materials):
        if name != AIR_NAME:
            logger.warning("Material '%s' is not used by any boundary", name)
    for name in graph.unreferenced(BOUNDARY_TYPE, model.boundary_types):
        logger.warning("Boundary type '%s' is not used by any boundary", name)
    for zone in model.inner_zones():
        if not graph.is_referenced(ZONE, zone.name):
            logger.warning("Zone '%s' has no boundaries", zone.name)
