"""Per-node explanation of where a score comes from."""

from __future__ import annotations

from dataclasses import dataclass

from ..attribution.connections import (
    Connection,
    Connections,
    adjacency_source,
    total_out_weights,
)
from ..core.address import NodeAddress
from ..errors import StructuralInvariantViolation
from .node_score import NodeScore


@dataclass(frozen=True)
class ScoredConnection:
    connection: Connection
    source: NodeAddress
    connection_score: float


@dataclass(frozen=True)
class NodeDecomposition:
    score: float
    scored_connections: tuple[ScoredConnection, ...]

    def contribution_total(self) -> float:
        return sum(sc.connection_score for sc in self.scored_connections)


PagerankNodeDecomposition = dict[NodeAddress, NodeDecomposition]


def _sort_key(item: tuple[int, ScoredConnection]) -> tuple[float, str, int]:
    position, scored = item
    return (-scored.connection_score, scored.source.canonical, position)


def decompose(scores: NodeScore, connections: Connections) -> PagerankNodeDecomposition:
    """Attribute every node's score to its inbound connections.

    A connection contributes its source's score times its transition
    probability (weight over the source's total outgoing weight), the same
    probability the Markov chain uses. At the stationary distribution a
    node's contributions sum to its score. Contributions are listed largest
    first; ties go to the smaller source address, then to the earlier
    connection.
    """
    out_weight = total_out_weights(connections)

    result: PagerankNodeDecomposition = {}
    for node in sorted(connections):
        if node not in scores:
            raise StructuralInvariantViolation(f"No score for node {node}")

        scored: list[ScoredConnection] = []
        for connection in connections[node]:
            source = adjacency_source(node, connection.adjacency)
            if out_weight[source] == 0:
                raise StructuralInvariantViolation(
                    f"Cannot normalize transitions out of {source}: total weight is zero"
                )
            try:
                source_score = scores[source]
            except KeyError:
                raise StructuralInvariantViolation(
                    f"No score for connection source {source}"
                ) from None
            scored.append(
                ScoredConnection(
                    connection=connection,
                    source=source,
                    connection_score=connection.weight / out_weight[source] * source_score,
                )
            )

        ordered = sorted(enumerate(scored), key=_sort_key)
        result[node] = NodeDecomposition(
            score=scores[node],
            scored_connections=tuple(sc for _, sc in ordered),
        )
    return result
