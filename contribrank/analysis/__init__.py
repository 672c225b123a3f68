"""Scoring, decomposition and the pagerank entry point."""

from .decomposition import NodeDecomposition, ScoredConnection, decompose
from .node_score import score_by_constant_total, score_by_maximum_probability
from .pagerank import PagerankResult, pagerank, pagerank_sync
from .weights import edge_evaluator_from_types, load_type_weights

__all__ = [
    "NodeDecomposition",
    "PagerankResult",
    "ScoredConnection",
    "decompose",
    "edge_evaluator_from_types",
    "load_type_weights",
    "pagerank",
    "pagerank_sync",
    "score_by_constant_total",
    "score_by_maximum_probability",
]
