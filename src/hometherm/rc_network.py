"""
RC network - lumped thermal graph compiled from a validated Model.

Nodes carry heat capacity (J/K, infinite for outer zones) and edges carry
thermal conductance (W/K), both as pint quantities. The network is stored
as two arenas addressed by integer index, plus lookup tables:

- zone name -> zone node
- (zone name, marker) -> every node tagged with that marker

A controller assembles ``C·dT/dt = -L·T + inputs`` from
:attr:`RCNetwork.nodes` and :attr:`RCNetwork.edges` (or
:meth:`RCNetwork.conductance_matrix`); integrating it is not done here.

Example:
    >>> from hometherm import load_model, build_network
    >>>
    >>> model = load_model("house.json5")
    >>> network = build_network(model)
    >>> living = network.zone_node("living_room")
    >>> heating = network.marker_nodes("living_room", "floor_heating")
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .boundary_types import BoundaryLayer, LayeredBoundaryType, SimpleBoundaryType
from .config import NetworkConfig
from .thermal.properties import series_conductance
from .units import HEAT_CAPACITY, Q_, THERMAL_CONDUCTANCE, Quantity, checked, is_infinite

if TYPE_CHECKING:
    from .model import Boundary, Model

logger = logging.getLogger(__name__)

MarkerKey = tuple[str, str]


@dataclass(frozen=True, slots=True)
class Node:
    """A thermal mass of the network.

    Attributes:
        index: Position in :attr:`RCNetwork.nodes`.
        heat_capacity: Heat capacity, stored in J/K (infinite for outer zones).
        zone_name: Zone this node represents, for zone nodes only.
        marker: ``(zone name, marker)`` tag, for marked boundary nodes only.
        group: Index of the boundary that created the node; ``None`` for zone nodes.
    """

    index: int
    heat_capacity: Quantity
    zone_name: str | None = None
    marker: MarkerKey | None = None
    group: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "heat_capacity", checked(self.heat_capacity, HEAT_CAPACITY, "heat_capacity"))

    @property
    def is_zone(self) -> bool:
        """Whether this is a zone node."""
        return self.zone_name is not None

    @property
    def is_boundary_condition(self) -> bool:
        """Whether the node temperature is an input (infinite heat capacity)."""
        return is_infinite(self.heat_capacity)


@dataclass(frozen=True, slots=True)
class Edge:
    """A thermal conductance between two nodes.

    Attributes:
        index: Position in :attr:`RCNetwork.edges`.
        source: Index of the first node.
        target: Index of the second node.
        conductance: Thermal conductance, stored in W/K.
        group: Index of the boundary that created the edge.
    """

    index: int
    source: int
    target: int
    conductance: Quantity
    group: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "conductance", checked(self.conductance, THERMAL_CONDUCTANCE, "conductance"))

    def other(self, node_index: int) -> int:
        """Index of the node at the far end from *node_index*."""
        return self.target if node_index == self.source else self.source


class RCNetwork:
    """
    Immutable RC network with name-based lookups.

    Use :func:`build_network` to compile one from a model.
    """

    __slots__ = ("_adjacency", "_edges", "_group_labels", "_marker_index", "_nodes", "_zone_index")

    def __init__(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        zone_index: Mapping[str, int],
        marker_index: Mapping[MarkerKey, Sequence[int]],
        group_labels: Sequence[str] = (),
    ) -> None:
        self._nodes = tuple(nodes)
        self._edges = tuple(edges)
        self._zone_index = MappingProxyType(dict(zone_index))
        self._marker_index = MappingProxyType({key: tuple(indices) for key, indices in marker_index.items()})
        self._group_labels = tuple(group_labels)

        adjacency: dict[int, list[int]] = defaultdict(list)
        for edge in self._edges:
            adjacency[edge.source].append(edge.index)
            adjacency[edge.target].append(edge.index)
        self._adjacency = MappingProxyType({node: tuple(edges) for node, edges in adjacency.items()})

    # -------------------------------------------------------------------------
    # Arenas
    # -------------------------------------------------------------------------

    @property
    def nodes(self) -> tuple[Node, ...]:
        """All nodes in index order."""
        return self._nodes

    @property
    def edges(self) -> tuple[Edge, ...]:
        """All edges in index order."""
        return self._edges

    @property
    def node_count(self) -> int:
        """Number of nodes."""
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        """Number of edges."""
        return len(self._edges)

    def node(self, index: int) -> Node:
        """Get a node by index."""
        return self._nodes[index]

    # -------------------------------------------------------------------------
    # Name lookups
    # -------------------------------------------------------------------------

    def zone_node(self, name: str) -> Node:
        """
        O(1): Get the node of a zone.

        Raises:
            KeyError: If the network has no zone named *name*.
        """
        try:
            return self._nodes[self._zone_index[name]]
        except KeyError:
            raise KeyError(f"No zone named '{name}'") from None  # noqa: TRY003

    def marker_nodes(self, zone_name: str, marker: str) -> list[Node]:
        """
        O(1): Get every node tagged with *marker* on boundaries of *zone_name*.

        A marker used by several boundaries of the same zone resolves to
        several nodes. Unknown markers give an empty list.
        """
        return [self._nodes[i] for i in self._marker_index.get((zone_name, marker), ())]

    def markers(self) -> list[MarkerKey]:
        """All ``(zone name, marker)`` keys present in the network."""
        return list(self._marker_index)

    # -------------------------------------------------------------------------
    # Topology
    # -------------------------------------------------------------------------

    def edges_of(self, node: Node | int) -> list[Edge]:
        """Edges incident to *node*."""
        index = node.index if isinstance(node, Node) else node
        return [self._edges[i] for i in self._adjacency.get(index, ())]

    def neighbors(self, node: Node | int) -> list[Node]:
        """Nodes connected to *node* by an edge, in edge order."""
        index = node.index if isinstance(node, Node) else node
        return [self._nodes[edge.other(index)] for edge in self.edges_of(index)]

    def edge_between(self, a: Node | int, b: Node | int) -> Edge | None:
        """The first edge connecting *a* and *b*, or ``None``."""
        a_index = a.index if isinstance(a, Node) else a
        b_index = b.index if isinstance(b, Node) else b
        for edge in self.edges_of(a_index):
            if edge.other(a_index) == b_index:
                return edge
        return None

    def groups(self) -> dict[int, list[Node]]:
        """Boundary group -> nodes created for that boundary (zone nodes excluded)."""
        groups: dict[int, list[Node]] = defaultdict(list)
        for node in self._nodes:
            if node.group is not None:
                groups[node.group].append(node)
        return dict(groups)

    def group_label(self, group: int) -> str:
        """Human readable description of the boundary behind *group*."""
        return self._group_labels[group]

    @property
    def group_count(self) -> int:
        """Number of boundary groups."""
        return len(self._group_labels)

    # -------------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------------

    def total_heat_capacity(self) -> Quantity:
        """Sum of all finite node heat capacities, J/K."""
        return Q_(
            math.fsum(node.heat_capacity.magnitude for node in self._nodes if not node.is_boundary_condition),
            HEAT_CAPACITY,
        )

    def conductance_matrix(self) -> Any:
        """
        Weighted Laplacian of the network as a dense numpy array.

        ``L[i, i]`` is the total conductance at node *i* and ``L[i, j]`` is
        minus the conductance between *i* and *j*, all in W/K, so the heat flowing into
        the nodes is ``-L @ T``.

        Requires numpy (``pip install hometherm[numpy]``).
        """
        np = _get_np()
        size = len(self._nodes)
        matrix = np.zeros((size, size))
        for edge in self._edges:
            i, j, g = edge.source, edge.target, edge.conductance.magnitude
            matrix[i, i] += g
            matrix[j, j] += g
            matrix[i, j] -= g
            matrix[j, i] -= g
        return matrix

    def __repr__(self) -> str:
        return f"RCNetwork(nodes={len(self._nodes)}, edges={len(self._edges)}, groups={len(self._group_labels)})"


def _get_np() -> Any:
    """Get numpy, raising ImportError if unavailable."""
    try:
        import numpy as np  # type: ignore[import-not-found]
    except ImportError:
        msg = "numpy is required for matrix export. Install it with: pip install hometherm[numpy]"
        raise ImportError(msg) from None
    return np


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def build_network(model: Model, config: NetworkConfig | None = None) -> RCNetwork:
    """
    Compile a validated model into an RC network.

    Args:
        model: Validated model
        config: Build settings (defaults to still air)

    Returns:
        The RC network
    """
    return RCNetworkBuilder(model, config).build()


class RCNetworkBuilder:
    """
    Compiles a :class:`~hometherm.model.Model` into an :class:`RCNetwork`.

    One node per zone, then per boundary either a single edge (simple
    types) or a chain of ``n + 1`` nodes and ``n + 2`` edges (layered types
    with ``n`` layers). The model is assumed valid; building never fails.
    """

    __slots__ = ("_config", "_edges", "_group_labels", "_marker_index", "_model", "_nodes", "_zone_index")

    def __init__(self, model: Model, config: NetworkConfig | None = None) -> None:
        self._model = model
        self._config = config or NetworkConfig()
        self._nodes: list[Node] = []
        self._edges: list[Edge] = []
        self._zone_index: dict[str, int] = {}
        self._marker_index: dict[MarkerKey, list[int]] = defaultdict(list)
        self._group_labels: list[str] = []

    def build(self) -> RCNetwork:
        """Build the network. Each call starts from scratch."""
        self._nodes = []
        self._edges = []
        self._zone_index = {}
        self._marker_index = defaultdict(list)
        self._group_labels = []

        air = self._model.air
        for name, zone in self._model.zones.items():
            self._zone_index[name] = self._add_node(zone.heat_capacity(air), zone_name=name).index

        for group, boundary in enumerate(self._model.boundaries):
            self._group_labels.append(
                f"{boundary.zones[0].name} | {boundary.zones[1].name}: {boundary.boundary_type.name}"
            )
            boundary_type = boundary.boundary_type
            if isinstance(boundary_type, SimpleBoundaryType):
                self._add_simple_boundary(boundary, boundary_type, group)
            else:
                self._add_layered_boundary(boundary, boundary_type, group)

        network = RCNetwork(
            nodes=self._nodes,
            edges=self._edges,
            zone_index=self._zone_index,
            marker_index=self._marker_index,
            group_labels=self._group_labels,
        )
        logger.info("Built %r", network)
        return network

    def _add_node(
        self,
        heat_capacity: Quantity,
        *,
        zone_name: str | None = None,
        marker: MarkerKey | None = None,
        group: int | None = None,
    ) -> Node:
        node = Node(
            index=len(self._nodes),
            heat_capacity=heat_capacity,
            zone_name=zone_name,
            marker=marker,
            group=group,
        )
        self._nodes.append(node)
        if marker is not None:
            self._marker_index[marker].append(node.index)
        return node

    def _add_edge(self, source: int, target: int, conductance: Quantity, group: int) -> Edge:
        edge = Edge(index=len(self._edges), source=source, target=target, conductance=conductance, group=group)
        self._edges.append(edge)
        return edge

    def _add_simple_boundary(self, boundary: Boundary, boundary_type: SimpleBoundaryType, group: int) -> None:
        """Lump film, U-value and film into one edge between the zone nodes."""
        z1 = self._zone_index[boundary.zones[0].name]
        z2 = self._zone_index[boundary.zones[1].name]
        film = boundary.convection_conductance(self._config.wind_speed)
        wall = (boundary_type.u * boundary.area).to(THERMAL_CONDUCTANCE)
        self._add_edge(z1, z2, series_conductance(film, wall, film), group)

    def _add_layered_boundary(self, boundary: Boundary, boundary_type: LayeredBoundaryType, group: int) -> None:
        """Add the chain of layer nodes between the two zone nodes.

        Node ``i`` sits at the interface before layer ``i``; the edge from
        node ``i`` to node ``i + 1`` is the conductance of layer ``i``.
        """
        zone_name = boundary.zones[0].name
        z1 = self._zone_index[zone_name]
        z2 = self._zone_index[boundary.zones[1].name]
        area = boundary.area
        layers = boundary_type.layers
        film = boundary.convection_conductance(self._config.wind_speed)

        def marker_key(marker: str | None) -> MarkerKey | None:
            return (zone_name, marker) if marker is not None else None

        first = self._add_node(
            layers[0].heat_capacity(area) / 2.0,
            marker=marker_key(boundary_type.initial_marker),
            group=group,
        )
        self._add_edge(z1, first.index, film, group)

        previous = first
        for layer, next_layer in _following(layers):
            if next_layer is None:
                heat_capacity = layer.heat_capacity(area) / 2.0
            else:
                heat_capacity = (layer.heat_capacity(area) + next_layer.heat_capacity(area)) / 2.0
            node = self._add_node(heat_capacity, marker=marker_key(layer.following_marker), group=group)
            self._add_edge(previous.index, node.index, layer.conductance(area), group)
            previous = node

        self._add_edge(previous.index, z2, film, group)


def _following(layers: Sequence[BoundaryLayer]) -> list[tuple[BoundaryLayer, BoundaryLayer | None]]:
    """Pair each layer with the one after it (``None`` for the last)."""
    return [(layer, layers[i + 1] if i + 1 < len(layers) else None) for i, layer in enumerate(layers)]
