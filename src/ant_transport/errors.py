"""Exception hierarchy for state-space construction and the expectation solve."""

from __future__ import annotations


class ChainError(Exception):
    """Base class for errors raised while building or solving the chain."""


class StateSpaceEmptyError(ChainError):
    """Raised when enumeration yields no states, no terminal states or no start."""


class NoTransitionsError(ChainError):
    """Raised when a non-terminal configuration has no legal move."""

    def __init__(self, key: int, msg: str | None = None):
        self.key = key
        super().__init__(msg or f"Non-terminal configuration {key} has no outgoing moves.")


class InvalidTransitionError(ChainError):
    """Raised when a move produces a configuration outside the valid state space."""

    def __init__(self, source_key: int, target, msg: str | None = None):
        self.source_key = source_key
        self.target = target
        super().__init__(msg or f"Transition from {source_key} produced invalid state {target}.")


class NonConvergenceError(ChainError):
    """Raised when the iteration exhausts its step budget."""

    def __init__(self, steps: int, expected_steps: float):
        self.steps = steps
        self.expected_steps = expected_steps
        super().__init__(
            f"Expectation did not converge within {steps} steps "
            f"(partial expectation {expected_steps:.6f})."
        )


class ReportWriteError(ChainError):
    """Raised when report artifacts cannot be written."""


__all__ = [
    "ChainError",
    "StateSpaceEmptyError",
    "NoTransitionsError",
    "InvalidTransitionError",
    "NonConvergenceError",
    "ReportWriteError",
]
