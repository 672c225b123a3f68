"""Graph boundary for the ranking engine.

The engine only needs to list nodes, list edges and query neighbors. That
capability set is the ``Graph`` protocol; ``ContributionGraph`` is the
networkx-backed implementation used by the command line and the tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Protocol

import networkx as nx

from ..errors import ConfigurationError
from .address import EdgeAddress, NodeAddress, parse_address


@dataclass(frozen=True)
class Edge:
    """A directed, typed edge. The address's leading parts are its type."""

    address: EdgeAddress
    src: NodeAddress
    dst: NodeAddress


class Direction(Enum):
    """Which end of an edge a neighbor query starts from."""

    IN = "in"  # edges whose dst is the node
    OUT = "out"  # edges whose src is the node
    ANY = "any"


@dataclass(frozen=True)
class Neighbor:
    node: NodeAddress
    edge: Edge


class Graph(Protocol):
    """Read-only view the ranking engine consumes."""

    def nodes(self, prefix: NodeAddress = NodeAddress.empty) -> Iterator[NodeAddress]:
        ...

    def edges(
        self, address_prefix: EdgeAddress = EdgeAddress.empty
    ) -> Iterator[Edge]:
        ...

    def neighbors(
        self,
        node: NodeAddress,
        direction: Direction = Direction.ANY,
        node_prefix: NodeAddress = NodeAddress.empty,
        edge_prefix: EdgeAddress = EdgeAddress.empty,
    ) -> Iterator[Neighbor]:
        ...


class ContributionGraph:
    """Directed multigraph of contribution entities."""

    def __init__(self):
        self.graph = nx.MultiDiGraph()
        self._edges: dict[EdgeAddress, Edge] = {}

    def add_node(self, address: NodeAddress) -> None:
        self.graph.add_node(address)

    def add_edge(self, edge: Edge) -> None:
        """Add an edge whose endpoints are already present.

        Re-adding an identical edge is a no-op; reusing an address for
        different endpoints is rejected.
        """
        for endpoint in (edge.src, edge.dst):
            if not self.graph.has_node(endpoint):
                raise ValueError(
                    f"Edge {edge.address} has dangling endpoint {endpoint}"
                )

        existing = self._edges.get(edge.address)
        if existing is not None:
            if existing != edge:
                raise ValueError(
                    f"Edge address {edge.address} already used for a different edge"
                )
            return

        self.graph.add_edge(edge.src, edge.dst, key=edge.address, edge=edge)
        self._edges[edge.address] = edge

    def has_node(self, address: NodeAddress) -> bool:
        return self.graph.has_node(address)

    def has_edge(self, address: EdgeAddress) -> bool:
        return address in self._edges

    def node_count(self) -> int:
        return self.graph.number_of_nodes()

    def edge_count(self) -> int:
        return self.graph.number_of_edges()

    def nodes(self, prefix: NodeAddress = NodeAddress.empty) -> Iterator[NodeAddress]:
        """Yield nodes matching ``prefix`` in canonical address order."""
        for address in sorted(self.graph.nodes):
            if address.has_prefix(prefix):
                yield address

    def edges(
        self,
        address_prefix: EdgeAddress = EdgeAddress.empty,
        src_prefix: NodeAddress = NodeAddress.empty,
        dst_prefix: NodeAddress = NodeAddress.empty,
    ) -> Iterator[Edge]:
        """Yield edges matching all prefixes in canonical address order."""
        for address, edge in sorted(self._edges.items()):
            if (
                address.has_prefix(address_prefix)
                and edge.src.has_prefix(src_prefix)
                and edge.dst.has_prefix(dst_prefix)
            ):
                yield edge

    def neighbors(
        self,
        node: NodeAddress,
        direction: Direction = Direction.ANY,
        node_prefix: NodeAddress = NodeAddress.empty,
        edge_prefix: EdgeAddress = EdgeAddress.empty,
    ) -> Iterator[Neighbor]:
        """Yield neighbors of ``node`` ordered by connecting edge address.

        A loop edge is reported once for ``Direction.ANY``.
        """
        if not self.graph.has_node(node):
            raise ValueError(f"Node not in graph: {node}")

        candidates: dict[EdgeAddress, Neighbor] = {}
        if direction in (Direction.IN, Direction.ANY):
            for src, _, data in self.graph.in_edges(node, data=True):
                candidates[data["edge"].address] = Neighbor(src, data["edge"])
        if direction in (Direction.OUT, Direction.ANY):
            for _, dst, data in self.graph.out_edges(node, data=True):
                candidates[data["edge"].address] = Neighbor(dst, data["edge"])

        for address in sorted(candidates):
            neighbor = candidates[address]
            if address.has_prefix(edge_prefix) and neighbor.node.has_prefix(
                node_prefix
            ):
                yield neighbor

    @classmethod
    def from_node_link(cls, data: dict[str, Any]) -> "ContributionGraph":
        """Build a graph from networkx node-link JSON.

        Node ``id`` and link ``source``/``target`` values are addresses,
        either as part lists or in ``/``-joined form (``"github/USER/alice"``).
        A link ``key`` may be an edge address in the same forms; networkx's
        integer multiedge keys, or a missing key, become
        ``link/<source>/<target>/<key or position>``.
        """
        contribution_graph = cls()
        for node in data.get("nodes", []):
            contribution_graph.add_node(_address_from_json(NodeAddress, node["id"]))

        links = data.get("links", data.get("edges", []))
        for position, link in enumerate(links):
            src = _address_from_json(NodeAddress, link["source"])
            dst = _address_from_json(NodeAddress, link["target"])
            key = link.get("key", position)
            if isinstance(key, int) and not isinstance(key, bool):
                address = EdgeAddress.from_parts("link", str(src), str(dst), str(key))
            else:
                address = _address_from_json(EdgeAddress, key)
            contribution_graph.add_edge(Edge(address=address, src=src, dst=dst))
        return contribution_graph


def _address_from_json(cls, value: Any):
    if isinstance(value, str):
        return parse_address(cls, value)
    if isinstance(value, (list, tuple)) and all(isinstance(p, str) for p in value):
        return cls(tuple(value))
    raise ConfigurationError(
        f"{cls.__name__} must be a string or a list of strings, got {value!r}"
    )
