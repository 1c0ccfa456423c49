"""State containers for the seed-transport chain."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

Position = Tuple[int, int]
StateKey = int


@dataclass(frozen=True)
class ProblemSpec:
    """Grid and marker parameters shared by every configuration of one chain."""

    grid_size: int = 5
    markers: int = 5

    def __post_init__(self) -> None:
        if self.grid_size < 2:
            msg = f"grid_size must be at least 2, got {self.grid_size}."
            raise ValueError(msg)
        if not 1 <= self.markers <= self.grid_size:
            msg = f"markers must be in [1, {self.grid_size}], got {self.markers}."
            raise ValueError(msg)

    @property
    def source_row(self) -> int:
        return self.grid_size - 1

    @property
    def target_row(self) -> int:
        return 0

    @property
    def row_mask(self) -> int:
        return (1 << self.grid_size) - 1

    @property
    def initial_source_mask(self) -> int:
        return (1 << self.markers) - 1

    @property
    def start(self) -> Position:
        centre = self.grid_size // 2
        return centre, centre

    @property
    def key_space(self) -> int:
        """Number of slots needed to index every packed key (max key + 1)."""
        n = self.grid_size
        return (1 << (2 * n + 1)) * n * n

    @property
    def max_key(self) -> int:
        return self.key_space - 1


DEFAULT_PROBLEM = ProblemSpec()


@dataclass(frozen=True)
class Configuration:
    """Agent position, carried marker and occupancy of the two edge rows.

    ``source`` and ``target`` are ``grid_size``-bit sets: bit ``i`` is the cell in
    column ``i`` of the source row (``grid_size - 1``) or target row (``0``).
    """

    x: int
    y: int
    carrying: bool
    source: int
    target: int
    problem: ProblemSpec = DEFAULT_PROBLEM

    # ------------------------------------------------------------ predicates --
    def is_terminal(self) -> bool:
        """All markers delivered and none in transit."""
        return self.target.bit_count() == self.problem.markers and not self.carrying

    def is_valid(self) -> bool:
        p = self.problem
        n = p.grid_size
        if not (0 <= self.x < n and 0 <= self.y < n):
            return False
        if self.source & ~p.row_mask or self.target & ~p.row_mask:
            return False

        column = 1 << self.x
        # A carrying agent on an empty target cell would already have dropped.
        if self.y == p.target_row and self.carrying and not self.target & column:
            return False
        # An empty-handed agent on a full source cell would already have picked up.
        if self.y == p.source_row and not self.carrying and self.source & column:
            return False
        if self.is_terminal() and self.y != p.target_row:
            return False

        count = self.source.bit_count() + self.target.bit_count() + int(self.carrying)
        return count == p.markers

    # -------------------------------------------------------------- identity --
    def key(self) -> StateKey:
        """Injective packing ``((((c << n | t) << n | s) * n + x) * n + y)``."""
        n = self.problem.grid_size
        packed = int(self.carrying)
        packed = (packed << n) | self.target
        packed = (packed << n) | self.source
        packed = packed * n + self.x
        return packed * n + self.y

    # ------------------------------------------------------------- builders --
    def with_position(self, x: int, y: int) -> "Configuration":
        return replace(self, x=x, y=y)

    def apply_side_effect(self) -> "Configuration":
        """Drop or pick up a marker at the current cell, if the rules call for it."""
        p = self.problem
        column = 1 << self.x
        if self.carrying and self.y == p.target_row and not self.target & column:
            return replace(self, carrying=False, target=self.target | column)
        if not self.carrying and self.y == p.source_row and self.source & column:
            return replace(self, carrying=True, source=self.source & ~column)
        return self


def decode_key(key: StateKey, problem: ProblemSpec = DEFAULT_PROBLEM) -> Configuration:
    """Inverse of :meth:`Configuration.key`."""
    if key < 0 or key > problem.max_key:
        msg = f"Key {key} outside [0, {problem.max_key}]."
        raise ValueError(msg)
    n = problem.grid_size
    key, y = divmod(key, n)
    key, x = divmod(key, n)
    source = key & problem.row_mask
    key >>= n
    target = key & problem.row_mask
    carrying = bool(key >> n)
    return Configuration(x, y, carrying, source, target, problem)


def initial_configuration(problem: ProblemSpec = DEFAULT_PROBLEM) -> Configuration:
    """Agent at the grid centre, empty-handed, every marker on the source row.

    On a 2x2 grid the centre lies on the source row, so the pickup rule is
    applied to the starting cell as well.
    """
    x, y = problem.start
    start = Configuration(x, y, False, problem.initial_source_mask, 0, problem)
    return start.apply_side_effect()


__all__ = [
    "Configuration",
    "DEFAULT_PROBLEM",
    "Position",
    "ProblemSpec",
    "StateKey",
    "decode_key",
    "initial_configuration",
]
