"""Tests for sparse Markov chain utilities and the stationary solver."""

import asyncio
import threading

import pytest

from contribrank.attribution.markov_chain import (
    SolverOptions,
    SparseMarkovRow,
    compute_delta,
    find_stationary_distribution,
    sparse_markov_chain_action,
    sparse_markov_chain_from_transition_matrix,
    uniform_distribution,
    validate_chain,
)
from contribrank.errors import (
    ConvergenceWarning,
    RankingCancelled,
    StructuralInvariantViolation,
)

# Stationary distribution is (1/3, 2/3)
ASYMMETRIC = [[0.5, 0.5], [0.25, 0.75]]


def solver_options(**overrides) -> SolverOptions:
    values = dict(
        convergence_threshold=1e-10,
        max_iterations=10_000,
        yield_after_ms=30,
        verbose=False,
    )
    values.update(overrides)
    return SolverOptions(**values)


def solve(chain, cancel=None, **overrides):
    return asyncio.run(
        find_stationary_distribution(chain, solver_options(**overrides), cancel=cancel)
    )


def test_uniform_distribution():
    assert uniform_distribution(0) == []
    assert uniform_distribution(4) == [0.25] * 4


def test_compute_delta():
    assert compute_delta([0.1, 0.9], [0.2, 0.7]) == pytest.approx(0.2)
    assert compute_delta([], []) == 0.0
    with pytest.raises(StructuralInvariantViolation):
        compute_delta([1.0], [0.5, 0.5])


def test_from_transition_matrix_transposes():
    chain = sparse_markov_chain_from_transition_matrix(ASYMMETRIC)
    assert chain == [
        SparseMarkovRow(neighbor=(0, 1), weight=(0.5, 0.25)),
        SparseMarkovRow(neighbor=(0, 1), weight=(0.5, 0.75)),
    ]


def test_from_transition_matrix_drops_zeros():
    chain = sparse_markov_chain_from_transition_matrix([[0, 1], [1, 0]])
    assert chain == [
        SparseMarkovRow(neighbor=(1,), weight=(1.0,)),
        SparseMarkovRow(neighbor=(0,), weight=(1.0,)),
    ]


def test_from_transition_matrix_rejects_non_stochastic():
    with pytest.raises(StructuralInvariantViolation, match="not stochastic"):
        sparse_markov_chain_from_transition_matrix([[0.5, 0.4], [0.0, 1.0]])


def test_from_transition_matrix_rejects_non_square():
    with pytest.raises(StructuralInvariantViolation, match="not square"):
        sparse_markov_chain_from_transition_matrix([[1.0, 0.0]])


def test_validate_chain_rejects_bad_rows():
    with pytest.raises(StructuralInvariantViolation, match="empty"):
        validate_chain([SparseMarkovRow((), ())])
    with pytest.raises(StructuralInvariantViolation, match="outside"):
        validate_chain([SparseMarkovRow((1,), (1.0,))])
    with pytest.raises(StructuralInvariantViolation, match="neighbors"):
        validate_chain([SparseMarkovRow((0,), (0.5, 0.5))])


def test_action_is_one_step():
    chain = sparse_markov_chain_from_transition_matrix(ASYMMETRIC)
    assert sparse_markov_chain_action(chain, [1.0, 0.0]) == pytest.approx([0.5, 0.5])
    assert sparse_markov_chain_action(chain, [0.0, 1.0]) == pytest.approx([0.25, 0.75])


def test_finds_stationary_distribution():
    chain = sparse_markov_chain_from_transition_matrix(ASYMMETRIC)
    pi = solve(chain)
    assert pi == pytest.approx([1 / 3, 2 / 3], abs=1e-8)
    assert sum(pi) == pytest.approx(1.0, abs=1e-9)


def test_empty_chain():
    assert solve([]) == []


def test_zero_iterations_returns_uniform():
    chain = sparse_markov_chain_from_transition_matrix(ASYMMETRIC)
    assert solve(chain, max_iterations=0) == [0.5, 0.5]


def test_iteration_cap_returns_last_iterate():
    chain = sparse_markov_chain_from_transition_matrix(ASYMMETRIC)
    # One step from uniform: (0.5*0.5 + 0.5*0.25, 0.5*0.5 + 0.5*0.75)
    assert solve(chain, max_iterations=1) == pytest.approx([0.375, 0.625])


def test_iteration_cap_warns_when_verbose(caplog):
    chain = sparse_markov_chain_from_transition_matrix(ASYMMETRIC)
    with pytest.warns(ConvergenceWarning):
        solve(chain, max_iterations=1, verbose=True)
    assert "FAILED to converge" in caplog.text


def test_yielding_does_not_change_result():
    chain = sparse_markov_chain_from_transition_matrix(
        [[0.1, 0.6, 0.3], [0.5, 0.25, 0.25], [0.2, 0.2, 0.6]]
    )
    eager = solve(chain, yield_after_ms=0)
    lazy = solve(chain, yield_after_ms=1e9)
    assert eager == lazy


def test_other_tasks_run_while_solving():
    chain = sparse_markov_chain_from_transition_matrix(ASYMMETRIC)
    ticks = []

    async def ticker():
        for _ in range(3):
            ticks.append(1)
            await asyncio.sleep(0)

    async def main():
        task = asyncio.create_task(ticker())
        pi = await find_stationary_distribution(
            chain, solver_options(yield_after_ms=0)
        )
        await task
        return pi

    pi = asyncio.run(main())
    assert pi == pytest.approx([1 / 3, 2 / 3], abs=1e-8)
    assert len(ticks) == 3


def test_cancellation_checked_at_suspension():
    chain = sparse_markov_chain_from_transition_matrix(ASYMMETRIC)
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(RankingCancelled):
        solve(chain, cancel=cancel, yield_after_ms=0)
