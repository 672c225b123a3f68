"""Sparse Markov chains and their stationary distributions."""

from __future__ import annotations

import asyncio
import logging
import time
import warnings
from dataclasses import dataclass
from typing import Protocol, Sequence

from ..errors import ConvergenceWarning, RankingCancelled, StructuralInvariantViolation

log = logging.getLogger(__name__)

# Allowed drift of a node's outgoing probability sum from 1.0.
STOCHASTIC_TOLERANCE = 1e-6

Distribution = list[float]


@dataclass(frozen=True)
class SparseMarkovRow:
    """Transitions arriving at a node: ``neighbor[k]`` sends it ``weight[k]`` of its mass."""

    neighbor: tuple[int, ...]
    weight: tuple[float, ...]


SparseMarkovChain = Sequence[SparseMarkovRow]


class CancelToken(Protocol):
    def is_set(self) -> bool:
        ...


@dataclass(frozen=True)
class SolverOptions:
    convergence_threshold: float
    max_iterations: int
    yield_after_ms: float
    verbose: bool = False


def uniform_distribution(n: int) -> Distribution:
    if n == 0:
        return []
    return [1.0 / n] * n


def sparse_markov_chain_action(
    chain: SparseMarkovChain, pi: Distribution
) -> Distribution:
    """Advance ``pi`` one step, visiting rows in index order."""
    result = []
    for row in chain:
        total = 0.0
        for j, p in zip(row.neighbor, row.weight):
            total += pi[j] * p
        result.append(total)
    return result


def compute_delta(pi0: Distribution, pi1: Distribution) -> float:
    """Largest absolute per-component difference between two distributions."""
    if len(pi0) != len(pi1):
        raise StructuralInvariantViolation(
            f"Distribution lengths differ: {len(pi0)} != {len(pi1)}"
        )
    return max((abs(a - b) for a, b in zip(pi0, pi1)), default=0.0)


def validate_chain(chain: SparseMarkovChain) -> None:
    """Check rows are nonempty and in range and transitions are stochastic.

    Row i holds transitions arriving at i, so the outgoing probabilities of
    node j are spread across rows; they must sum to 1 for every j.
    """
    n = len(chain)
    outflow = [0.0] * n
    for i, row in enumerate(chain):
        if len(row.neighbor) != len(row.weight):
            raise StructuralInvariantViolation(
                f"Row {i} has {len(row.neighbor)} neighbors but {len(row.weight)} weights"
            )
        if not row.neighbor:
            raise StructuralInvariantViolation(f"Row {i} is empty")
        for j, p in zip(row.neighbor, row.weight):
            if not 0 <= j < n:
                raise StructuralInvariantViolation(
                    f"Row {i} references index {j} outside 0..{n - 1}"
                )
            if p < 0:
                raise StructuralInvariantViolation(
                    f"Row {i} has negative probability {p}"
                )
            outflow[j] += p

    for j, total in enumerate(outflow):
        if abs(total - 1.0) > STOCHASTIC_TOLERANCE:
            raise StructuralInvariantViolation(
                f"Transitions out of node {j} are not stochastic: sum to {total}"
            )


def sparse_markov_chain_from_transition_matrix(
    matrix: Sequence[Sequence[float]],
) -> list[SparseMarkovRow]:
    """Convert a dense row-stochastic transition matrix into sparse rows.

    ``matrix[i][j]`` is the probability of moving from node i to node j.
    The result's row j lists the nonzero transitions arriving at j.
    """
    n = len(matrix)
    neighbors: list[list[int]] = [[] for _ in range(n)]
    weights: list[list[float]] = [[] for _ in range(n)]
    for i, dense_row in enumerate(matrix):
        if len(dense_row) != n:
            raise StructuralInvariantViolation(
                f"Matrix is not square: row {i} has {len(dense_row)} entries, expected {n}"
            )
        for j, p in enumerate(dense_row):
            if p != 0:
                neighbors[j].append(i)
                weights[j].append(float(p))

    rows = [SparseMarkovRow(tuple(nb), tuple(w)) for nb, w in zip(neighbors, weights)]
    validate_chain(rows)
    return rows


async def _suspend(cancel: CancelToken | None) -> None:
    await asyncio.sleep(0)
    if cancel is not None and cancel.is_set():
        raise RankingCancelled("Stationary distribution search was cancelled")


async def find_stationary_distribution(
    chain: SparseMarkovChain,
    options: SolverOptions,
    cancel: CancelToken | None = None,
) -> Distribution:
    """Approximate the stationary distribution by bounded power iteration.

    Starts from the uniform distribution and stops once the largest
    component change is within ``options.convergence_threshold`` or after
    ``options.max_iterations`` steps, returning the last iterate either way.
    Every ``options.yield_after_ms`` milliseconds the loop suspends so other
    tasks on the event loop can run; suspension never changes the result.

    Args:
        chain: Inbound transition rows, one per node
        options: Convergence and scheduling options
        cancel: Optional token checked at every suspension point

    Returns:
        Distribution parallel to the chain rows
    """
    validate_chain(chain)
    pi = uniform_distribution(len(chain))
    if not chain:
        return pi

    last_yield = time.monotonic()
    delta = float("inf")
    for iteration in range(1, options.max_iterations + 1):
        next_pi = sparse_markov_chain_action(chain, pi)
        delta = compute_delta(pi, next_pi)
        pi = next_pi

        if delta <= options.convergence_threshold:
            if options.verbose:
                log.info(f"[{iteration}] CONVERGED: delta {delta:.3e}")
            else:
                log.debug(f"Converged after {iteration} iterations (delta {delta:.3e})")
            return pi

        if (time.monotonic() - last_yield) * 1000 >= options.yield_after_ms:
            await _suspend(cancel)
            last_yield = time.monotonic()

    if options.verbose:
        message = (
            f"[{options.max_iterations}] FAILED to converge: "
            f"delta {delta:.3e} > threshold {options.convergence_threshold:.3e}"
        )
        log.warning(message)
        warnings.warn(message, ConvergenceWarning, stacklevel=2)
    else:
        log.debug(f"Stopped after {options.max_iterations} iterations (delta {delta:.3e})")
    return pi
