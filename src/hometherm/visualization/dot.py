"""
Graphviz DOT export of RC networks.

Renders zone nodes at the top level and wraps the nodes of every boundary
in its own cluster, so a network can be inspected with ``dot -Tsvg``.
The output is meant for humans; nothing reads it back.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ..units import HEAT_CAPACITY, THERMAL_CONDUCTANCE, is_infinite

if TYPE_CHECKING:
    from ..rc_network import Node, RCNetwork
    from ..units import Quantity


@dataclass(frozen=True)
class DotConfig:
    """Configuration for DOT export.

    Attributes:
        graph_name: Name of the emitted graph
        rankdir: Graphviz layout direction (``LR``, ``TB``, ...)
        precision: Significant digits for printed values
        show_capacity: Whether node labels include heat capacity
        show_conductance: Whether edge labels include conductance
        zone_shape: Node shape of inner zones
        outer_zone_shape: Node shape of outer zones
        boundary_shape: Node shape of boundary layer nodes
    """

    graph_name: str = "rc_network"
    rankdir: str = "LR"
    precision: int = 3
    show_capacity: bool = True
    show_conductance: bool = True
    zone_shape: str = "box"
    outer_zone_shape: str = "doubleoctagon"
    boundary_shape: str = "ellipse"


def _quote(text: str) -> str:
    """Quote a string as a DOT identifier. Backslash escapes such as ``\\n`` pass through."""
    return '"' + text.replace('"', '\\"') + '"'


def _format_value(value: Quantity, unit: str, label: str, precision: int) -> str:
    if is_infinite(value):
        return "∞"
    return f"{value.to(unit).magnitude:.{precision}g} {label}"


def _node_id(node: Node) -> str:
    return f"n{node.index}"


def _node_line(node: Node, config: DotConfig, indent: str) -> str:
    if node.zone_name is not None:
        label = node.zone_name
        shape = config.outer_zone_shape if node.is_boundary_condition else config.zone_shape
    else:
        label = node.marker[1] if node.marker is not None else ""
        shape = config.boundary_shape

    if config.show_capacity:
        capacity = _format_value(node.heat_capacity, HEAT_CAPACITY, "J/K", config.precision)
        label = f"{label}\\n{capacity}" if label else capacity

    return f"{indent}{_node_id(node)} [label={_quote(label)}, shape={shape}];"


def network_to_dot(network: RCNetwork, config: DotConfig | None = None) -> str:
    """
    Render an RC network as Graphviz DOT text.

    Args:
        network: The network to render
        config: Optional rendering configuration

    Returns:
        DOT source as a string

    Examples:
        Write a diagram next to the model::

            from hometherm import build_network, load_model
            from hometherm.visualization import network_to_dot

            network = build_network(load_model("house.json5"))
            with open("house.dot", "w") as f:
                f.write(network_to_dot(network))
    """
    if config is None:
        config = DotConfig()

    lines = [
        f"graph {_quote(config.graph_name)} {{",
        f"  rankdir={config.rankdir};",
    ]

    for node in network.nodes:
        if node.group is None:
            lines.append(_node_line(node, config, "  "))

    for group, nodes in sorted(network.groups().items()):
        lines.append(f"  subgraph cluster_{group} {{")
        lines.append(f"    label={_quote(network.group_label(group))};")
        lines.extend(_node_line(node, config, "    ") for node in nodes)
        lines.append("  }")

    for edge in network.edges:
        attrs = ""
        if config.show_conductance:
            conductance = _format_value(edge.conductance, THERMAL_CONDUCTANCE, "W/K", config.precision)
            attrs = f" [label={_quote(conductance)}]"
        lines.append(f"  n{edge.source} -- n{edge.target}{attrs};")

    lines.append("}")
    return "\n".join(lines) + "\n"


def write_dot(network: RCNetwork, filepath: Path | str, config: DotConfig | None = None) -> Path:
    """Write :func:`network_to_dot` output to *filepath* and return the path."""
    filepath = Path(filepath)
    filepath.write_text(network_to_dot(network, config), encoding="utf-8")
    return filepath
