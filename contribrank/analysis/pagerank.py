"""PageRank over contribution graphs.

Pipeline: graph -> connections -> ordered sparse Markov chain -> stationary
distribution -> node distribution -> scores, plus a decomposition of every
score into the contributions of its inbound connections.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ..attribution.connections import (
    EdgeEvaluator,
    EdgeWeight,
    create_connections,
    create_ordered_sparse_markov_chain,
    distribution_to_node_distribution,
    total_out_weights,
)
from ..attribution.markov_chain import (
    CancelToken,
    SolverOptions,
    find_stationary_distribution,
)
from ..config import DEFAULT_PAGERANK_OPTIONS, PagerankOptions
from ..core.address import EdgeAddress
from ..core.graph import Graph
from ..errors import ConfigurationError
from .decomposition import PagerankNodeDecomposition, decompose
from .node_score import NodeScore, score_by_constant_total

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PagerankResult:
    pnd: PagerankNodeDecomposition
    scores: NodeScore
    # Weight the evaluator returned for every edge, for auditing
    edge_weights: dict[EdgeAddress, EdgeWeight]


def _check_outflow(connections) -> None:
    """Reject graphs where some node sends out no weight at all.

    Only possible with a zero self-loop weight; such a node has no
    transition probabilities to normalize.
    """
    for node, weight in sorted(total_out_weights(connections).items()):
        if weight == 0:
            raise ConfigurationError(
                f"Node {node} sends out no weight; use a positive self_loop_weight"
            )


async def pagerank(
    graph: Graph,
    edge_weight: EdgeEvaluator,
    options: PagerankOptions | None = None,
    cancel: CancelToken | None = None,
) -> PagerankResult:
    """Rank every node of ``graph``.

    Args:
        graph: Immutable graph snapshot
        edge_weight: Two-way weight of each edge
        options: Run options, defaults to ``DEFAULT_PAGERANK_OPTIONS``
        cancel: Optional token checked whenever the solver suspends

    Returns:
        Scores, their decomposition and the evaluated edge weights

    Raises:
        ConfigurationError: invalid options, a negative edge weight, or a
            node left with no outgoing weight by a zero self_loop_weight
        NormalizationError: the normalization prefix selects no mass
    """
    options = (options or DEFAULT_PAGERANK_OPTIONS).validate()

    # Each edge is evaluated once; connections and the audit map share results.
    edge_weights: dict[EdgeAddress, EdgeWeight] = {}

    def evaluate(edge):
        weight = edge_weight(edge)
        edge_weights[edge.address] = weight
        return weight

    connections = create_connections(graph, evaluate, options.self_loop_weight)
    _check_outflow(connections)
    osmc = create_ordered_sparse_markov_chain(connections)
    log.debug(f"Ranking {len(osmc.node_order)} nodes, {len(edge_weights)} edges")

    distribution = await find_stationary_distribution(
        osmc.chain,
        SolverOptions(
            convergence_threshold=options.convergence_threshold,
            max_iterations=options.max_iterations,
            yield_after_ms=options.yield_after_ms,
            verbose=options.verbose,
        ),
        cancel=cancel,
    )
    pi = distribution_to_node_distribution(osmc.node_order, distribution)
    scores = score_by_constant_total(
        pi, options.total_score, options.total_score_node_prefix
    )
    pnd = decompose(scores, connections)
    return PagerankResult(pnd=pnd, scores=scores, edge_weights=edge_weights)


def pagerank_sync(
    graph: Graph,
    edge_weight: EdgeEvaluator,
    options: PagerankOptions | None = None,
) -> PagerankResult:
    """Run ``pagerank`` to completion on a fresh event loop."""
    return asyncio.run(pagerank(graph, edge_weight, options))
