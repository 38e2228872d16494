"""Shared fixtures for hometherm tests."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from hometherm import Model, parse_model
from hometherm.references import ReferenceGraph

_HOUSE: dict[str, Any] = {
    "materials": {
        "brick": {"thermal_conductivity": 0.8, "specific_heat_capacity": 840.0, "density": 1700.0},
        "eps": {"thermal_conductivity": 0.035, "specific_heat_capacity": 1450.0, "density": 20.0},
        "concrete": {"thermal_conductivity": 1.4, "specific_heat_capacity": 880.0, "density": 2300.0},
    },
    "boundary_types": {
        "exterior_wall": {
            "layers": [
                {"marker": "wall_surface"},
                {"material": "brick", "thickness": 0.3},
                {"material": "eps", "thickness": 0.15},
            ]
        },
        "floor": {
            "layers": [
                {"material": "concrete", "thickness": 0.05},
                {"marker": "floor_heating"},
                {"material": "eps", "thickness": 0.12},
            ]
        },
        "window": {"u": 0.8, "g": 0.5},
        "door": {"u": 1.2},
    },
    "zones": {
        "living_room": {
            "volume": 75.0,
            "adjacent_zones": [{"suffix": "ceiling_cavity", "boundary_type": "door", "area": 30.0}],
        },
        "bedroom": {"volume": 40.0},
        "garage": None,
    },
    "boundaries": [
        {
            "boundary_type": "exterior_wall",
            "zones": ["living_room", "outside"],
            "area": 40.0,
            "sub_boundaries": [{"boundary_type": "window", "area": 6.0}],
        },
        {"boundary_type": "floor", "zones": ["living_room", "ground"], "area": 30.0},
        {"boundary_type": "floor", "zones": ["bedroom", "ground"], "area": 16.0},
        {"boundary_type": "door", "zones": ["bedroom", "living_room"], "area": 2.0},
        {"boundary_type": "exterior_wall", "zones": ["bedroom", "garage"], "area": 12.0},
    ],
}


@pytest.fixture
def house_document() -> dict[str, Any]:
    """A small house: two rooms, a garage, an adjacent ceiling cavity."""
    return copy.deepcopy(_HOUSE)


@pytest.fixture
def house_model(house_document: dict[str, Any]) -> Model:
    """The house document, validated."""
    return parse_model(house_document)


@pytest.fixture
def house_file(tmp_path: Path, house_document: dict[str, Any]) -> Path:
    """The house document written to disk."""
    path = tmp_path / "house.json5"
    path.write_text(json.dumps(house_document), encoding="utf-8")
    return path


@pytest.fixture
def minimal_document() -> dict[str, Any]:
    """Two outer zones connected by nothing, the smallest meaningful document."""
    return {
        "materials": {},
        "boundary_types": {"bt": {"u": 1.0, "g": 0.0}},
        "zones": {"z1": None, "z2": None},
        "boundaries": [],
    }


@pytest.fixture
def reference_graph() -> ReferenceGraph:
    """Create a reference graph: boundaries 0 and 1 touch zone 'a'."""
    graph = ReferenceGraph()
    graph.register(0, "zone", "a")
    graph.register(0, "zone", "outside")
    graph.register(0, "boundary_type", "wall")
    graph.register(0, "material", "brick")
    graph.register(1, "zone", "a")
    graph.register(1, "zone", "b")
    graph.register(1, "boundary_type", "window")
    return graph
