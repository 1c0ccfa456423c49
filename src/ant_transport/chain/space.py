"""Exhaustive enumeration of valid configurations."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import product
from typing import Dict, Iterator, List

from ant_transport.chain.state import (
    DEFAULT_PROBLEM,
    Configuration,
    ProblemSpec,
    StateKey,
    initial_configuration,
)
from ant_transport.errors import StateSpaceEmptyError


@dataclass
class StateSpace:
    """Valid configurations keyed by identity, plus the start and absorbing keys."""

    problem: ProblemSpec
    configurations: Dict[StateKey, Configuration]
    initial_key: StateKey
    terminal_keys: List[StateKey] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.configurations)

    def __contains__(self, key: object) -> bool:
        return key in self.configurations

    def __getitem__(self, key: StateKey) -> Configuration:
        return self.configurations[key]

    @property
    def initial(self) -> Configuration:
        return self.configurations[self.initial_key]

    def non_terminal(self) -> Iterator[Configuration]:
        terminal = set(self.terminal_keys)
        for key in sorted(self.configurations):
            if key not in terminal:
                yield self.configurations[key]


def candidate_configurations(problem: ProblemSpec = DEFAULT_PROBLEM) -> Iterator[Configuration]:
    """Every combination of position, carrying flag and row occupancy, valid or not."""
    n = problem.grid_size
    masks = range(problem.row_mask + 1)
    for x, y, carrying, target, source in product(range(n), range(n), (False, True), masks, masks):
        yield Configuration(x, y, carrying, source, target, problem)


def enumerate_states(problem: ProblemSpec = DEFAULT_PROBLEM) -> StateSpace:
    """Brute-force the valid state space and record the start and terminal keys."""
    configurations: Dict[StateKey, Configuration] = {}
    terminal_keys: List[StateKey] = []
    for config in candidate_configurations(problem):
        if not config.is_valid():
            continue
        key = config.key()
        configurations[key] = config
        if config.is_terminal():
            terminal_keys.append(key)

    if not configurations:
        msg = f"No valid configurations for {problem}."
        raise StateSpaceEmptyError(msg)
    if not terminal_keys:
        msg = f"No terminal configurations for {problem}."
        raise StateSpaceEmptyError(msg)

    start = initial_configuration(problem)
    initial_key = start.key()
    if initial_key not in configurations:
        msg = f"Initial configuration {start} is not a valid state."
        raise StateSpaceEmptyError(msg)

    return StateSpace(
        problem=problem,
        configurations=configurations,
        initial_key=initial_key,
        terminal_keys=sorted(terminal_keys),
    )


__all__ = ["StateSpace", "candidate_configurations", "enumerate_states"]
