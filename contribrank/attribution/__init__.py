"""Graph to Markov chain conversion and stationary distributions."""

from .connections import (
    Connection,
    EdgeWeight,
    OrderedSparseMarkovChain,
    create_connections,
    create_ordered_sparse_markov_chain,
    distribution_to_node_distribution,
)
from .markov_chain import SolverOptions, SparseMarkovRow, find_stationary_distribution

__all__ = [
    "Connection",
    "EdgeWeight",
    "OrderedSparseMarkovChain",
    "SolverOptions",
    "SparseMarkovRow",
    "create_connections",
    "create_ordered_sparse_markov_chain",
    "distribution_to_node_distribution",
    "find_stationary_distribution",
]
