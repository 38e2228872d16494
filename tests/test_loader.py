"""Tests for loading and validating model documents."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any

import pytest
from pint import DimensionalityError

from hometherm import Model, load_document, load_model, parse_model
from hometherm.boundary_types import LayeredBoundaryType, SimpleBoundaryType
from hometherm.exceptions import (
    DanglingReferenceError,
    DuplicateZoneError,
    HomeThermError,
    LayerStructureError,
    ModelFormatError,
    ReservedZoneError,
    SubBoundaryAreaError,
)
from hometherm.materials import default_air
from hometherm.units import Q_


def _with_layers(layers: list[dict[str, Any]]) -> dict[str, Any]:
    """Document with one layered boundary type 'bt' built from *layers*."""
    return {
        "materials": {"m1": {"thermal_conductivity": 1.0, "specific_heat_capacity": 1000.0, "density": 1000.0}},
        "boundary_types": {"bt": {"layers": layers}},
        "zones": {"z": {"volume": 10.0}},
        "boundaries": [{"boundary_type": "bt", "zones": ["z", "outside"], "area": 1.0}],
    }


# ---------------------------------------------------------------------------
# Successful loading
# ---------------------------------------------------------------------------


class TestLoadModel:
    def test_load_from_file(self, house_file: Path) -> None:
        model = load_model(house_file)
        assert isinstance(model, Model)
        assert model.source == house_file
        assert len(model.boundaries) == 7

    def test_load_from_string_path(self, house_file: Path) -> None:
        assert len(load_model(str(house_file)).zones) == 6

    def test_model_load_classmethod(self, house_file: Path) -> None:
        assert len(Model.load(house_file)) == 7

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_model(tmp_path / "nope.json5")

    def test_invalid_json5(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json5"
        path.write_text("{ not json")
        with pytest.raises(ModelFormatError) as exc_info:
            load_model(path)
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert "broken.json5" in str(exc_info.value)

    def test_load_json5_document(self, tmp_path: Path) -> None:
        path = tmp_path / "model.json5"
        path.write_text(
            """{
            // Comments, unquoted keys and trailing commas are allowed
            materials: {
                air: {
                    thermal_conductivity: 0,
                    specific_heat_capacity: 0,
                    density: 0,
                },
                brick: {
                    thermal_conductivity: 1,
                    specific_heat_capacity: 2,
                    density: 3,
                }
            },
            boundary_types: {
                wall: {
                    layers: [
                        {
                            material: "brick",
                            thickness: 0.1,
                        }
                    ]
                },
                window: {
                    u: 1,
                    g: 0.2,
                }
            },
            zones: {
                a: { volume: 123 },
                b: null,
            },
            boundaries: [
                {
                    boundary_type: "wall",
                    zones: ["a", "b"],
                    area: 10,
                    sub_boundaries: [
                        { boundary_type: "window", area: 1 }
                    ]
                }
            ],
        }""",
            encoding="utf-8",
        )
        model = load_model(path)
        assert model.zone("a").volume == Q_(123.0, "m ** 3")
        assert model.zone("b").is_outer
        assert len(model.boundaries) == 2
        wall = model.boundaries[1].boundary_type
        assert isinstance(wall, LayeredBoundaryType)
        assert wall.name == "wall"
        assert wall.layers[0].material.name == "brick"
        assert wall.layers[0].thickness == Q_(0.1, "m")
        assert model.boundaries[1].area == Q_(9.0, "m ** 2")

    def test_invalid_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "latin1.json5"
        path.write_bytes(b'{"zones": {"\xff\xfe": null}}')
        with pytest.raises(ModelFormatError) as exc_info:
            load_model(path)
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
        assert exc_info.value.context == f"Model file {path}"

    def test_load_document_returns_raw_data(self, house_file: Path, house_document: dict[str, Any]) -> None:
        assert load_document(house_file) == house_document

    def test_logs_summary(self, house_file: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="hometherm"):
            load_model(house_file)
        assert "6 zones, 7 boundaries" in caplog.text


class TestParseModel:
    def test_empty_document(self) -> None:
        model = parse_model({})
        assert list(model.zones) == ["outside", "ground"]
        assert model.boundaries == ()
        assert model.air == default_air()

    def test_null_sections_are_empty(self) -> None:
        model = parse_model({"materials": None, "boundary_types": None, "zones": None, "boundaries": None})
        assert len(model) == 0

    def test_minimal(self, minimal_document: dict[str, Any]) -> None:
        model = parse_model(minimal_document)
        assert list(model.zones) == ["outside", "ground", "z1", "z2"]
        assert all(zone.is_outer for zone in model.zones.values())

    def test_from_dict(self, minimal_document: dict[str, Any]) -> None:
        assert Model.from_dict(minimal_document).source is None

    def test_source_recorded(self, minimal_document: dict[str, Any]) -> None:
        assert parse_model(minimal_document, source="house.json5").source == Path("house.json5")

    def test_document_must_be_object(self) -> None:
        with pytest.raises(ModelFormatError):
            parse_model([])  # type: ignore[arg-type]

    def test_section_type_checked(self) -> None:
        with pytest.raises(ModelFormatError, match="'boundaries' must be a list"):
            parse_model({"boundaries": {}})

    def test_unknown_top_level_key_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="hometherm"):
            parse_model({"comment": "hello"})
        assert "comment" in caplog.text


# ---------------------------------------------------------------------------
# Materials
# ---------------------------------------------------------------------------


class TestMaterials:
    def test_air_synthesized(self, house_model: Model) -> None:
        assert house_model.materials["air"] == default_air()
        assert house_model.air is house_model.materials["air"]

    def test_air_overridden(self) -> None:
        air = {"thermal_conductivity": 0.025, "specific_heat_capacity": 1005.0, "density": 1.2}
        model = parse_model({"materials": {"air": air}})
        assert model.air.specific_heat_capacity == Q_(1005.0, "J / (kg * K)")

    def test_missing_field(self) -> None:
        doc = {"materials": {"brick": {"thermal_conductivity": 0.8, "density": 1700.0}}}
        with pytest.raises(ModelFormatError, match="specific_heat_capacity"):
            parse_model(doc)

    def test_zero_conductivity_allowed(self) -> None:
        doc = {"materials": {"void": {"thermal_conductivity": 0, "specific_heat_capacity": 1.0, "density": 1.0}}}
        assert parse_model(doc).materials["void"].thermal_conductivity.magnitude == 0.0

    def test_negative_conductivity_rejected(self) -> None:
        doc = {"materials": {"void": {"thermal_conductivity": -0.1, "specific_heat_capacity": 1.0, "density": 1.0}}}
        with pytest.raises(ModelFormatError, match="Material 'void'"):
            parse_model(doc)

    def test_negative_density_rejected(self) -> None:
        doc = {"materials": {"m": {"thermal_conductivity": 1.0, "specific_heat_capacity": 1.0, "density": -1.0}}}
        with pytest.raises(ModelFormatError):
            parse_model(doc)

    @pytest.mark.parametrize(
        ("value", "message"),
        [
            (True, "number or a quantity string"),
            (None, "number or a quantity string"),
            ([1.0], "number or a quantity string"),
            (math.inf, "finite"),
            (math.nan, "finite"),
            ("1.0", "incompatible units"),
            ("fast", "not a valid quantity"),
        ],
    )
    def test_invalid_values_rejected(self, value: Any, message: str) -> None:
        doc = {"materials": {"m": {"thermal_conductivity": value, "specific_heat_capacity": 1.0, "density": 1.0}}}
        with pytest.raises(ModelFormatError, match=message):
            parse_model(doc)

    def test_huge_integer_rejected(self) -> None:
        doc = {"materials": {"m": {"thermal_conductivity": 1.0, "specific_heat_capacity": 1.0, "density": 10**400}}}
        with pytest.raises(ModelFormatError, match="'density' is too large") as exc_info:
            parse_model(doc)
        assert exc_info.value.context == "Material 'm'"

    def test_values_with_units(self) -> None:
        brick = {
            "thermal_conductivity": "800 mW / (m * K)",
            "specific_heat_capacity": "0.84 kJ / (kg * K)",
            "density": "1.7 g / cm ** 3",
        }
        material = parse_model({"materials": {"brick": brick}}).materials["brick"]
        assert material.thermal_conductivity.magnitude == pytest.approx(0.8)
        assert material.specific_heat_capacity.magnitude == pytest.approx(840.0)
        assert material.density.magnitude == pytest.approx(1700.0)

    def test_unused_material_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        doc = {"materials": {"granite": {"thermal_conductivity": 2.8, "specific_heat_capacity": 790, "density": 2700}}}
        with caplog.at_level(logging.WARNING, logger="hometherm"):
            parse_model(doc)
        assert "Material 'granite' is not used" in caplog.text
        assert "'air'" not in caplog.text


# ---------------------------------------------------------------------------
# Boundary types
# ---------------------------------------------------------------------------


class TestBoundaryTypes:
    def test_simple(self, house_model: Model) -> None:
        window = house_model.boundary_types["window"]
        assert isinstance(window, SimpleBoundaryType)
        assert window.u == Q_(0.8, "W / (m ** 2 * K)")
        assert window.g.magnitude == 0.5

    def test_simple_g_defaults_to_zero(self, house_model: Model) -> None:
        door = house_model.boundary_types["door"]
        assert isinstance(door, SimpleBoundaryType)
        assert door.g.magnitude == 0.0

    def test_g_above_one_rejected(self) -> None:
        with pytest.raises(ModelFormatError, match="'g'"):
            parse_model({"boundary_types": {"w": {"u": 1.0, "g": 1.5}}})

    def test_both_layers_and_u_rejected(self) -> None:
        with pytest.raises(ModelFormatError, match="not both"):
            parse_model({"boundary_types": {"w": {"u": 1.0, "layers": []}}})

    def test_neither_layers_nor_u_rejected(self) -> None:
        with pytest.raises(ModelFormatError, match="Boundary type 'w'"):
            parse_model({"boundary_types": {"w": {"g": 0.5}}})

    def test_layered_shares_material_instances(self, house_model: Model) -> None:
        wall = house_model.boundary_types["exterior_wall"]
        floor = house_model.boundary_types["floor"]
        assert isinstance(wall, LayeredBoundaryType)
        assert isinstance(floor, LayeredBoundaryType)
        assert wall.layers[1].material is house_model.materials["eps"]
        assert floor.layers[1].material is wall.layers[1].material

    def test_initial_marker(self, house_model: Model) -> None:
        wall = house_model.boundary_types["exterior_wall"]
        assert isinstance(wall, LayeredBoundaryType)
        assert wall.initial_marker == "wall_surface"
        assert [layer.following_marker for layer in wall.layers] == [None, None]

    def test_interface_marker(self, house_model: Model) -> None:
        floor = house_model.boundary_types["floor"]
        assert isinstance(floor, LayeredBoundaryType)
        assert floor.initial_marker is None
        assert [layer.following_marker for layer in floor.layers] == ["floor_heating", None]

    def test_trailing_marker(self) -> None:
        model = parse_model(_with_layers([{"material": "m1", "thickness": 0.1}, {"marker": "outer"}]))
        bt = model.boundary_types["bt"]
        assert isinstance(bt, LayeredBoundaryType)
        assert bt.layers[-1].following_marker == "outer"
        assert bt.markers == ["outer"]

    def test_empty_layers(self) -> None:
        with pytest.raises(LayerStructureError, match="empty layer list"):
            parse_model(_with_layers([]))

    def test_only_markers(self) -> None:
        with pytest.raises(LayerStructureError, match="only markers"):
            parse_model(_with_layers([{"marker": "a"}]))

    def test_consecutive_markers(self) -> None:
        layers = [{"material": "m1", "thickness": 0.1}, {"marker": "a"}, {"marker": "b"}]
        with pytest.raises(LayerStructureError) as exc_info:
            parse_model(_with_layers(layers))
        assert exc_info.value.boundary_type == "bt"
        assert "'a'" in str(exc_info.value)
        assert "'b'" in str(exc_info.value)

    def test_empty_marker_rejected(self) -> None:
        with pytest.raises(ModelFormatError, match="non-empty"):
            parse_model(_with_layers([{"marker": ""}, {"material": "m1", "thickness": 0.1}]))

    def test_zero_thickness_rejected(self) -> None:
        with pytest.raises(ModelFormatError, match="thickness"):
            parse_model(_with_layers([{"material": "m1", "thickness": 0}]))

    def test_thickness_with_unit(self) -> None:
        bt = parse_model(_with_layers([{"material": "m1", "thickness": "30 cm"}])).boundary_types["bt"]
        assert isinstance(bt, LayeredBoundaryType)
        assert bt.layers[0].thickness.magnitude == pytest.approx(0.3)
        assert str(bt.layers[0].thickness.units) == "meter"

    def test_thickness_with_mass_unit_rejected(self) -> None:
        with pytest.raises(ModelFormatError, match="incompatible units") as exc_info:
            parse_model(_with_layers([{"material": "m1", "thickness": "3 kg"}]))
        assert exc_info.value.context == "Boundary type 'bt'"
        assert isinstance(exc_info.value.__cause__, DimensionalityError)

    def test_g_as_percentage(self) -> None:
        window = parse_model({"boundary_types": {"w": {"u": 1.0, "g": "60 percent"}}}).boundary_types["w"]
        assert isinstance(window, SimpleBoundaryType)
        assert window.g.magnitude == pytest.approx(0.6)

    def test_unknown_material(self) -> None:
        with pytest.raises(DanglingReferenceError) as exc_info:
            parse_model(_with_layers([{"material": "granite", "thickness": 0.1}]))
        assert exc_info.value.kind == "material"
        assert exc_info.value.name == "granite"
        assert "Boundary type 'bt'" in str(exc_info.value)

    def test_unused_boundary_type_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="hometherm"):
            parse_model({"boundary_types": {"skylight": {"u": 1.4}}})
        assert "Boundary type 'skylight' is not used" in caplog.text


# ---------------------------------------------------------------------------
# Zones
# ---------------------------------------------------------------------------


class TestZones:
    def test_reserved_zones_first(self, house_model: Model) -> None:
        assert list(house_model.zones)[:2] == ["outside", "ground"]
        assert house_model.zone("outside").is_outer
        assert house_model.zone("ground").is_outer

    def test_document_order_with_adjacent_zones(self, house_model: Model) -> None:
        assert list(house_model.zones) == [
            "outside",
            "ground",
            "living_room",
            "living_room/ceiling_cavity",
            "bedroom",
            "garage",
        ]

    def test_volumes(self, house_model: Model) -> None:
        assert house_model.zone("living_room").volume == Q_(75.0, "m ** 3")
        assert house_model.zone("garage").volume is None
        assert house_model.zone("living_room/ceiling_cavity").volume == Q_(0.0, "m ** 3")

    def test_volume_with_unit(self) -> None:
        model = parse_model({"zones": {"closet": {"volume": "1500 L"}}})
        assert model.zone("closet").volume.magnitude == pytest.approx(1.5)  # type: ignore[union-attr]

    def test_huge_volume_rejected(self) -> None:
        with pytest.raises(ModelFormatError, match="'volume' is too large") as exc_info:
            parse_model({"zones": {"hall": {"volume": int("9" * 400)}}})
        assert exc_info.value.context == "Zone 'hall'"

    def test_outer_zone_with_adjacent_zones_rejected(self) -> None:
        doc = {
            "boundary_types": {"bt": {"u": 1.0}},
            "zones": {"shed": {"adjacent_zones": [{"suffix": "loft", "boundary_type": "bt", "area": 1.0}]}},
        }
        with pytest.raises(ModelFormatError, match="only inner zones") as exc_info:
            parse_model(doc)
        assert exc_info.value.context == "Zone 'shed'"

    def test_outer_zone_with_empty_adjacent_zones(self) -> None:
        model = parse_model({"zones": {"shed": {"volume": None, "adjacent_zones": []}}})
        assert model.zone("shed").is_outer

    @pytest.mark.parametrize("name", ["outside", "ground"])
    def test_reserved_name_rejected(self, name: str) -> None:
        with pytest.raises(ReservedZoneError, match="reserved") as exc_info:
            parse_model({"zones": {name: None}})
        assert exc_info.value.zone == name

    def test_zone_with_null_volume_is_outer(self) -> None:
        model = parse_model({"zones": {"attic": {"volume": None}}})
        assert model.zone("attic").is_outer

    def test_adjacent_zone_collides_with_declared_zone(self) -> None:
        doc = {
            "boundary_types": {"bt": {"u": 1.0}},
            "zones": {
                "a": {"volume": 1.0, "adjacent_zones": [{"suffix": "b", "boundary_type": "bt", "area": 1.0}]},
                "a/b": {"volume": 1.0},
            },
        }
        with pytest.raises(DuplicateZoneError) as exc_info:
            parse_model(doc)
        assert exc_info.value.zone == "a/b"

    def test_duplicate_adjacent_suffix(self) -> None:
        adjacent = {"suffix": "cavity", "boundary_type": "bt", "area": 1.0}
        doc = {
            "boundary_types": {"bt": {"u": 1.0}},
            "zones": {"a": {"volume": 1.0, "adjacent_zones": [adjacent, adjacent]}},
        }
        with pytest.raises(DuplicateZoneError):
            parse_model(doc)

    def test_adjacent_zone_unknown_boundary_type(self) -> None:
        doc = {"zones": {"a": {"volume": 1.0, "adjacent_zones": [{"suffix": "s", "boundary_type": "x", "area": 1}]}}}
        with pytest.raises(DanglingReferenceError) as exc_info:
            parse_model(doc)
        assert exc_info.value.kind == "boundary type"
        assert "'a'" in str(exc_info.value)
        assert "'a/s'" in str(exc_info.value)

    def test_inner_zone_without_boundaries_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="hometherm"):
            parse_model({"zones": {"pantry": {"volume": 3.0}}})
        assert "Zone 'pantry' has no boundaries" in caplog.text


# ---------------------------------------------------------------------------
# Boundaries
# ---------------------------------------------------------------------------


class TestBoundaries:
    def test_expansion_order(self, house_model: Model) -> None:
        summary = [(b.zone_names, b.boundary_type.name, b.area.magnitude) for b in house_model.boundaries]
        assert summary == [
            (("living_room", "living_room/ceiling_cavity"), "door", 30.0),
            (("living_room", "outside"), "window", 6.0),
            (("living_room", "outside"), "exterior_wall", 34.0),
            (("living_room", "ground"), "floor", 30.0),
            (("bedroom", "ground"), "floor", 16.0),
            (("bedroom", "living_room"), "door", 2.0),
            (("bedroom", "garage"), "exterior_wall", 12.0),
        ]

    def test_shared_instances(self, house_model: Model) -> None:
        first, *_, last = house_model.boundaries
        assert first.zones[0] is house_model.zone("living_room")
        assert last.boundary_type is house_model.boundary_types["exterior_wall"]
        assert house_model.boundaries[3].boundary_type is house_model.boundaries[4].boundary_type

    def test_sub_boundaries_take_remaining_area(self, minimal_document: dict[str, Any]) -> None:
        minimal_document["boundary_types"]["glass"] = {"u": 1.0, "g": 0.7}
        minimal_document["boundaries"] = [
            {
                "boundary_type": "bt",
                "zones": ["z1", "z2"],
                "area": 100.0,
                "sub_boundaries": [
                    {"boundary_type": "glass", "area": 3.0},
                    {"boundary_type": "glass", "area": 1.0},
                    {"boundary_type": "glass", "area": 4.0},
                ],
            }
        ]
        model = parse_model(minimal_document)
        assert [b.area for b in model.boundaries] == [Q_(a, "m ** 2") for a in (3.0, 1.0, 4.0, 92.0)]
        assert [b.boundary_type.name for b in model.boundaries] == ["glass", "glass", "glass", "bt"]

    def test_sub_boundaries_fill_area_exactly(self, minimal_document: dict[str, Any]) -> None:
        minimal_document["boundaries"] = [
            {
                "boundary_type": "bt",
                "zones": ["z1", "z2"],
                "area": 0.3,
                "sub_boundaries": [{"boundary_type": "bt", "area": 0.1}, {"boundary_type": "bt", "area": 0.2}],
            }
        ]
        model = parse_model(minimal_document)
        assert len(model.boundaries) == 3
        assert model.boundaries[-1].area.magnitude == 0.0

    def test_sub_boundaries_exceed_area(self, minimal_document: dict[str, Any]) -> None:
        minimal_document["boundaries"] = [
            {
                "boundary_type": "bt",
                "zones": ["z1", "z2"],
                "area": 10.0,
                "sub_boundaries": [{"boundary_type": "bt", "area": 6.0}, {"boundary_type": "bt", "area": 6.0}],
            }
        ]
        with pytest.raises(SubBoundaryAreaError) as exc_info:
            parse_model(minimal_document)
        assert exc_info.value.zones == ("z1", "z2")
        assert exc_info.value.area == 10.0
        assert exc_info.value.sub_area == pytest.approx(12.0)

    def test_unknown_zone(self, minimal_document: dict[str, Any]) -> None:
        minimal_document["boundaries"] = [{"boundary_type": "bt", "zones": ["z1", "attic"], "area": 1.0}]
        with pytest.raises(DanglingReferenceError) as exc_info:
            parse_model(minimal_document)
        assert exc_info.value.kind == "zone"
        assert exc_info.value.name == "attic"
        assert "'z1'" in str(exc_info.value)
        assert "'attic'" in str(exc_info.value)

    def test_unknown_boundary_type(self, minimal_document: dict[str, Any]) -> None:
        minimal_document["boundaries"] = [{"boundary_type": "glass", "zones": ["z1", "z2"], "area": 1.0}]
        with pytest.raises(DanglingReferenceError, match="unknown boundary type 'glass'"):
            parse_model(minimal_document)

    def test_unknown_sub_boundary_type(self, minimal_document: dict[str, Any]) -> None:
        minimal_document["boundaries"] = [
            {
                "boundary_type": "bt",
                "zones": ["z1", "z2"],
                "area": 5.0,
                "sub_boundaries": [{"boundary_type": "glass", "area": 1.0}],
            }
        ]
        with pytest.raises(DanglingReferenceError):
            parse_model(minimal_document)

    @pytest.mark.parametrize("zones", [["z1"], ["z1", "z2", "outside"], "z1", [1, 2]])
    def test_zones_must_be_pair(self, minimal_document: dict[str, Any], zones: Any) -> None:
        minimal_document["boundaries"] = [{"boundary_type": "bt", "zones": zones, "area": 1.0}]
        with pytest.raises(ModelFormatError, match="two zone names"):
            parse_model(minimal_document)

    def test_self_loop_rejected(self, minimal_document: dict[str, Any]) -> None:
        minimal_document["boundaries"] = [{"boundary_type": "bt", "zones": ["z1", "z1"], "area": 1.0}]
        with pytest.raises(ModelFormatError, match="two different zones"):
            parse_model(minimal_document)

    def test_negative_area_rejected(self, minimal_document: dict[str, Any]) -> None:
        minimal_document["boundaries"] = [{"boundary_type": "bt", "zones": ["z1", "z2"], "area": -1.0}]
        with pytest.raises(ModelFormatError, match="'area'"):
            parse_model(minimal_document)

    def test_zero_area_allowed(self, minimal_document: dict[str, Any]) -> None:
        minimal_document["boundaries"] = [{"boundary_type": "bt", "zones": ["z1", "z2"], "area": 0}]
        assert parse_model(minimal_document).boundaries[0].area.magnitude == 0.0

    def test_all_errors_share_base_class(self, minimal_document: dict[str, Any]) -> None:
        minimal_document["boundaries"] = [{"boundary_type": "bt", "zones": ["z1", "nowhere"], "area": 1.0}]
        with pytest.raises(HomeThermError):
            parse_model(minimal_document)
