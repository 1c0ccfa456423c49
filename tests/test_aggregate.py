import threading

import pytest

from ant_transport.chain.state import ProblemSpec
from ant_transport.errors import NonConvergenceError, StateSpaceEmptyError
from ant_transport.solver.aggregate import run_workers
from ant_transport.solver.expectation import SolverConfig, round_half_away, solve

SMALL = ProblemSpec(grid_size=3, markers=3)


class _FlakySolve:
    """Fails the first ``failures`` calls with NonConvergenceError."""

    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, problem, config):
        with self._lock:
            self.calls += 1
            fail = self.calls <= self.failures
        if fail:
            raise NonConvergenceError(config.max_steps, 12.5)
        return solve(problem, config)


def test_workers_agree_with_single_solve():
    single = solve(SMALL)
    result = run_workers(3, SMALL)
    assert result.workers == 3
    assert result.converged_workers == 3
    assert not result.failures
    assert result.expected_steps == pytest.approx(round_half_away(single.expected_steps, 6))
    assert result.steps_to_converge == single.steps_to_converge
    assert sorted(result.results) == [0, 1, 2]


def test_non_converged_worker_is_excluded():
    flaky = _FlakySolve(failures=1)
    result = run_workers(3, SMALL, SolverConfig(), solve_fn=flaky)
    assert flaky.calls == 3
    assert result.converged_workers == 2
    assert len(result.failures) == 1
    assert result.failures[0].expected_steps == 12.5
    statuses = sorted(row["status"] for row in result.as_records())
    assert statuses == ["converged", "converged", "non_converged"]
    assert result.summary()["converged_workers"] == 2


def test_all_workers_failing_raises():
    with pytest.raises(NonConvergenceError):
        run_workers(2, SMALL, SolverConfig(), solve_fn=_FlakySolve(failures=2))


def test_modelling_errors_abort_the_aggregate():
    def broken(problem, config):
        raise StateSpaceEmptyError("no states")

    with pytest.raises(StateSpaceEmptyError):
        run_workers(2, SMALL, solve_fn=broken)


def test_worker_count_must_be_positive():
    with pytest.raises(ValueError):
        run_workers(0, SMALL)
