"""
Visualization utilities for RC networks.

This module provides Graphviz DOT export of a built network, with one
cluster per boundary and conductances on the edges.

Example:
    >>> from hometherm import build_network, load_model
    >>> from hometherm.visualization import write_dot
    >>>
    >>> network = build_network(load_model("house.json5"))
    >>> write_dot(network, "house.dot")
"""

from __future__ import annotations

from .dot import DotConfig, network_to_dot, write_dot

__all__ = [
    "DotConfig",
    "network_to_dot",
    "write_dot",
]
