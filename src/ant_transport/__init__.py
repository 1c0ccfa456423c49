"""ant-transport package."""

from ant_transport.chain.space import StateSpace, enumerate_states
from ant_transport.chain.state import Configuration, ProblemSpec, decode_key, initial_configuration
from ant_transport.chain.transitions import TransitionTable, build_transitions
from ant_transport.errors import (
    ChainError,
    InvalidTransitionError,
    NonConvergenceError,
    NoTransitionsError,
    ReportWriteError,
    StateSpaceEmptyError,
)
from ant_transport.solver.aggregate import AggregateResult, run_workers
from ant_transport.solver.expectation import SolveResult, SolverConfig, solve
from ant_transport.eval.run_solve import main as run_solve

__all__ = [
    "AggregateResult",
    "ChainError",
    "Configuration",
    "InvalidTransitionError",
    "NoTransitionsError",
    "NonConvergenceError",
    "ProblemSpec",
    "ReportWriteError",
    "SolveResult",
    "SolverConfig",
    "StateSpace",
    "StateSpaceEmptyError",
    "TransitionTable",
    "build_transitions",
    "decode_key",
    "enumerate_states",
    "expected_steps",
    "initial_configuration",
    "run_solve",
    "run_workers",
    "solve",
]


def expected_steps(grid_size: int = 5, markers: int = 5, **config_kwargs) -> float:
    """Helper returning the single-run expectation for a square grid."""
    config = SolverConfig(**config_kwargs)
    return solve(ProblemSpec(grid_size=grid_size, markers=markers), config).expected_steps
