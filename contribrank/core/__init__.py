"""Addresses and the graph boundary."""

from .address import EdgeAddress, NodeAddress
from .graph import ContributionGraph, Direction, Edge, Graph, Neighbor

__all__ = [
    "ContributionGraph",
    "Direction",
    "Edge",
    "EdgeAddress",
    "Graph",
    "Neighbor",
    "NodeAddress",
]
