"""Expectation solver and multi-worker aggregation."""

from ant_transport.solver.aggregate import AggregateResult, WorkerFailure, run_workers
from ant_transport.solver.expectation import (
    SolveResult,
    SolverConfig,
    StepRecord,
    iterate_expectation,
    propagate,
    round_half_away,
    solve,
)

__all__ = [
    "AggregateResult",
    "SolveResult",
    "SolverConfig",
    "StepRecord",
    "WorkerFailure",
    "iterate_expectation",
    "propagate",
    "round_half_away",
    "run_workers",
    "solve",
]
