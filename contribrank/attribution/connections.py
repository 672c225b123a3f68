"""Conversion of a contribution graph into an ordered sparse Markov chain.

Each node's row in the chain describes where its stationary mass comes
from: every edge may carry mass in both directions, and every node has a
synthetic self loop so no row is ever empty.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Union

from ..core.address import NodeAddress
from ..core.graph import Edge, Graph
from ..errors import ConfigurationError, StructuralInvariantViolation
from .markov_chain import Distribution, SparseMarkovRow

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgeWeight:
    """Mass flowing src->dst (``to_weight``) and dst->src (``fro_weight``)."""

    to_weight: float
    fro_weight: float


EdgeEvaluator = Callable[[Edge], EdgeWeight]


@dataclass(frozen=True)
class SelfLoop:
    node: NodeAddress


@dataclass(frozen=True)
class InEdge:
    """Connection arriving at the edge's dst, sourced from its src."""

    edge: Edge


@dataclass(frozen=True)
class OutEdge:
    """Connection arriving at the edge's src, sourced from its dst."""

    edge: Edge


Adjacency = Union[SelfLoop, InEdge, OutEdge]


@dataclass(frozen=True)
class Connection:
    adjacency: Adjacency
    weight: float


Connections = dict[NodeAddress, list[Connection]]
NodeDistribution = dict[NodeAddress, float]


@dataclass(frozen=True)
class OrderedSparseMarkovChain:
    node_order: tuple[NodeAddress, ...]
    chain: tuple[SparseMarkovRow, ...]


def adjacency_source(target: NodeAddress, adjacency: Adjacency) -> NodeAddress:
    """Return the node whose mass flows into ``target`` along ``adjacency``."""
    if isinstance(adjacency, SelfLoop):
        return target
    if isinstance(adjacency, InEdge):
        return adjacency.edge.src
    if isinstance(adjacency, OutEdge):
        return adjacency.edge.dst
    raise TypeError(f"Unknown adjacency: {adjacency!r}")


def _check_weight(value: float, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{what} must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ConfigurationError(f"{what} must be finite and nonnegative, got {value}")
    return float(value)


def create_connections(
    graph: Graph,
    edge_weight: EdgeEvaluator,
    self_loop_weight: float,
) -> Connections:
    """Build every node's inbound connections.

    Args:
        graph: Graph snapshot to rank
        edge_weight: Evaluator returning the two-way weight of an edge
        self_loop_weight: Weight of each node's synthetic self loop

    Returns:
        Mapping from node to its connections, self loop first, then edge
        connections in edge address order
    """
    self_loop_weight = _check_weight(self_loop_weight, "Self-loop weight")

    connections: Connections = {}
    for node in graph.nodes():
        connections[node] = [Connection(SelfLoop(node), self_loop_weight)]

    for edge in sorted(graph.edges(), key=lambda e: e.address):
        weight = edge_weight(edge)
        to_weight = _check_weight(weight.to_weight, f"to_weight of edge {edge.address}")
        fro_weight = _check_weight(
            weight.fro_weight, f"fro_weight of edge {edge.address}"
        )

        for endpoint in (edge.src, edge.dst):
            if endpoint not in connections:
                raise StructuralInvariantViolation(
                    f"Edge {edge.address} has dangling endpoint {endpoint}"
                )

        connections[edge.dst].append(Connection(InEdge(edge), to_weight))
        connections[edge.src].append(Connection(OutEdge(edge), fro_weight))

    log.debug(f"Built connections for {len(connections)} nodes")
    return connections


def total_out_weights(connections: Connections) -> dict[NodeAddress, float]:
    """Sum, for every node, the weight of connections it is the source of."""
    out_weight = {node: 0.0 for node in connections}
    for target, node_connections in connections.items():
        for connection in node_connections:
            source = adjacency_source(target, connection.adjacency)
            if source not in out_weight:
                raise StructuralInvariantViolation(
                    f"Connection of {target} comes from unknown node {source}"
                )
            out_weight[source] += connection.weight
    return out_weight


def create_ordered_sparse_markov_chain(
    connections: Connections,
) -> OrderedSparseMarkovChain:
    """Assign dense indices and turn connections into transition probabilities.

    A connection's probability is its weight over the total weight its
    source sends out, so each node's outgoing transitions sum to 1 and the
    chain conserves mass. Row i lists the transitions arriving at node i.
    """
    node_order = tuple(sorted(connections))
    index_of = {node: i for i, node in enumerate(node_order)}

    out_weight = total_out_weights(connections)
    for node in node_order:
        if out_weight[node] == 0:
            raise StructuralInvariantViolation(
                f"Cannot normalize transitions out of {node}: total weight is zero"
            )

    rows: list[SparseMarkovRow] = []
    for node in node_order:
        neighbor: list[int] = []
        weight: list[float] = []
        for connection in connections[node]:
            source = adjacency_source(node, connection.adjacency)
            neighbor.append(index_of[source])
            weight.append(connection.weight / out_weight[source])
        rows.append(SparseMarkovRow(tuple(neighbor), tuple(weight)))

    return OrderedSparseMarkovChain(node_order=node_order, chain=tuple(rows))


def distribution_to_node_distribution(
    node_order: tuple[NodeAddress, ...] | list[NodeAddress],
    pi: Distribution,
) -> NodeDistribution:
    """Zip the dense node order back onto addresses."""
    if len(node_order) != len(pi):
        raise StructuralInvariantViolation(
            f"Node order has {len(node_order)} entries but distribution has {len(pi)}"
        )
    return {node: pi[i] for i, node in enumerate(node_order)}
