"""contribrank - PageRank-family ranking of contribution graphs.

Example:
    from contribrank import ContributionGraph, pagerank_sync, edge_evaluator_from_types

    result = pagerank_sync(graph, edge_evaluator_from_types({}))
    for node, score in sorted(result.scores.items(), key=lambda kv: -kv[1]):
        print(node, score)
"""

from .analysis import (
    PagerankResult,
    decompose,
    edge_evaluator_from_types,
    pagerank,
    pagerank_sync,
    score_by_constant_total,
)
from .attribution import EdgeWeight
from .config import DEFAULT_PAGERANK_OPTIONS, PagerankOptions, load_options
from .core import ContributionGraph, Edge, EdgeAddress, Graph, NodeAddress
from .errors import (
    ConfigurationError,
    ContribRankError,
    ConvergenceWarning,
    NormalizationError,
    RankingCancelled,
    StructuralInvariantViolation,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ContribRankError",
    "ContributionGraph",
    "ConvergenceWarning",
    "DEFAULT_PAGERANK_OPTIONS",
    "Edge",
    "EdgeAddress",
    "EdgeWeight",
    "Graph",
    "NodeAddress",
    "NormalizationError",
    "PagerankOptions",
    "PagerankResult",
    "RankingCancelled",
    "StructuralInvariantViolation",
    "decompose",
    "edge_evaluator_from_types",
    "load_options",
    "pagerank",
    "pagerank_sync",
    "score_by_constant_total",
]
