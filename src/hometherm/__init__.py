"""
hometherm: RC network models of buildings for predictive heating control.

This package turns a declarative building description (materials, boundary
types, zones, boundaries) into a validated model, and compiles that model
into a lumped resistor-capacitor network for a simulator or controller.

Basic usage:
    from hometherm import load_model, build_network

    # Load and validate a model document
    model = load_model("house.json5")

    # Compile the thermal network
    network = build_network(model)

    # Address nodes by name
    living_room = network.zone_node("living_room")
    floor_heating = network.marker_nodes("living_room", "floor_heating")

Physical values are pint quantities from :data:`hometherm.units.UNITS`::

    from hometherm import Q_, Material

    brick = Material("brick", Q_(0.8, "W / (m * K)"), Q_(840, "J / (kg * K)"), Q_(1700, "kg / m ** 3"))
"""

from __future__ import annotations

__version__ = "0.1.0"

# Catalog entries
from .boundary_types import BoundaryLayer, BoundaryType, LayeredBoundaryType, SimpleBoundaryType

# Configuration
from .config import NetworkConfig, find_model_file

# Exceptions
from .exceptions import (
    DanglingReferenceError,
    DuplicateZoneError,
    HomeThermError,
    LayerStructureError,
    ModelFileNotFoundError,
    ModelFormatError,
    ReservedZoneError,
    SubBoundaryAreaError,
)

# Loading
from .loader import ModelParser, load_document, load_model, parse_model
from .materials import Material, default_air
from .model import Boundary, Model

# RC network
from .rc_network import Edge, Node, RCNetwork, RCNetworkBuilder, build_network

# Reference graph
from .references import ReferenceGraph

# Units
from .units import Q_, UNITS, Quantity
from .zones import RESERVED_ZONE_NAMES, Zone

__all__ = [
    "RESERVED_ZONE_NAMES",
    "UNITS",
    "Boundary",
    "BoundaryLayer",
    "BoundaryType",
    "DanglingReferenceError",
    "DuplicateZoneError",
    "Edge",
    "HomeThermError",
    "LayerStructureError",
    "LayeredBoundaryType",
    "Material",
    "Model",
    "ModelFileNotFoundError",
    "ModelFormatError",
    "ModelParser",
    "NetworkConfig",
    "Node",
    "Q_",
    "Quantity",
    "RCNetwork",
    "RCNetworkBuilder",
    "ReferenceGraph",
    "ReservedZoneError",
    "SimpleBoundaryType",
    "SubBoundaryAreaError",
    "Zone",
    "__version__",
    "build_network",
    "default_air",
    "find_model_file",
    "load_document",
    "load_model",
    "parse_model",
]
