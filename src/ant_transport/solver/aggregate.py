"""Fan the full solve out over worker threads and reduce the results."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List

from ant_transport.chain.state import ProblemSpec
from ant_transport.errors import NonConvergenceError
from ant_transport.solver.expectation import SolveResult, SolverConfig, round_half_away, solve

SolveFn = Callable[[ProblemSpec, SolverConfig], SolveResult]


@dataclass(frozen=True)
class WorkerFailure:
    """A worker that exhausted its step budget."""

    worker: int
    steps: int
    expected_steps: float
    message: str


@dataclass
class AggregateResult:
    """Reduced outcome across workers.

    Workers recompute the same deterministic chain; averaging only smooths
    floating-point noise between runs.
    """

    problem: ProblemSpec
    config: SolverConfig
    workers: int
    expected_steps: float
    steps_to_converge: int
    results: Dict[int, SolveResult] = field(default_factory=dict)
    failures: List[WorkerFailure] = field(default_factory=list)

    @property
    def converged_workers(self) -> int:
        return len(self.results)

    def as_records(self) -> list[dict[str, Any]]:
        """One row per worker, failed workers included."""
        rows: list[dict[str, Any]] = []
        for worker, result in sorted(self.results.items()):
            row = {"worker": worker, "status": "converged"}
            row.update(result.as_record())
            rows.append(row)
        for failure in self.failures:
            rows.append(
                {
                    "worker": failure.worker,
                    "status": "non_converged",
                    "expected_steps": failure.expected_steps,
                    "steps_to_converge": failure.steps,
                    "grid_size": self.problem.grid_size,
                    "markers": self.problem.markers,
                }
            )
        rows.sort(key=lambda row: row["worker"])
        return rows

    def summary(self) -> dict[str, Any]:
        return {
            "grid_size": self.problem.grid_size,
            "markers": self.problem.markers,
            "workers": self.workers,
            "converged_workers": self.converged_workers,
            "expected_steps": self.expected_steps,
            "steps_to_converge": self.steps_to_converge,
            "max_steps": self.config.max_steps,
            "epsilon": self.config.epsilon,
            "patience": self.config.patience,
            "reset_streak": self.config.reset_streak,
            "decimals": self.config.decimals,
            "failures": [asdict(f) for f in self.failures],
        }


def default_workers() -> int:
    return os.cpu_count() or 1


def _solve_worker(problem: ProblemSpec, config: SolverConfig) -> SolveResult:
    return solve(problem, config)


def run_workers(
    workers: int | None = None,
    problem: ProblemSpec | None = None,
    config: SolverConfig | None = None,
    *,
    solve_fn: SolveFn = _solve_worker,
) -> AggregateResult:
    """Run ``solve_fn`` once per worker and average the converged results.

    Modelling defects (empty state space, missing or invalid transitions) from any
    worker propagate and fail the whole run. Workers that do not converge are
    excluded from the average and reported in ``failures``.
    """
    workers = default_workers() if workers is None else workers
    if workers < 1:
        msg = f"workers must be positive, got {workers}."
        raise ValueError(msg)
    problem = problem or ProblemSpec()
    config = config or SolverConfig()

    results: Dict[int, SolveResult] = {}
    failures: List[WorkerFailure] = []
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(solve_fn, problem, config): idx for idx in range(workers)}
        for future in as_completed(futures):
            idx = futures[future]
            try:
                results[idx] = future.result()
            except NonConvergenceError as exc:
                failures.append(
                    WorkerFailure(
                        worker=idx,
                        steps=exc.steps,
                        expected_steps=exc.expected_steps,
                        message=str(exc),
                    )
                )

    failures.sort(key=lambda f: f.worker)
    if not results:
        steps = max(f.steps for f in failures)
        partial = max(f.expected_steps for f in failures)
        raise NonConvergenceError(steps, partial)

    ordered = [results[idx] for idx in sorted(results)]
    mean_expected = sum(r.expected_steps for r in ordered) / len(ordered)
    mean_steps = sum(r.steps_to_converge for r in ordered) // len(ordered)
    return AggregateResult(
        problem=problem,
        config=config,
        workers=workers,
        expected_steps=round_half_away(mean_expected, config.decimals),
        steps_to_converge=mean_steps,
        results=dict(sorted(results.items())),
        failures=failures,
    )


__all__ = ["AggregateResult", "WorkerFailure", "default_workers", "run_workers"]
