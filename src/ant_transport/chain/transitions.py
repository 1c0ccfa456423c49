"""One-step transition table for the uniformly random agent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

import networkx as nx
import numpy as np

from ant_transport.chain.grid import grid_graph, legal_moves
from ant_transport.chain.space import StateSpace
from ant_transport.chain.state import Configuration, StateKey
from ant_transport.errors import InvalidTransitionError, NoTransitionsError


@dataclass
class TransitionTable:
    """Per non-terminal key, the multiset of keys reachable in one move.

    Repeated destinations are kept: each listed move is chosen with
    probability ``1 / out_degree``.
    """

    space: StateSpace
    successors: Dict[StateKey, List[StateKey]]

    def __len__(self) -> int:
        return len(self.successors)

    def __contains__(self, key: object) -> bool:
        return key in self.successors

    def __getitem__(self, key: StateKey) -> List[StateKey]:
        return self.successors[key]

    def out_degree(self, key: StateKey) -> int:
        return len(self.successors.get(key, ()))

    @property
    def edge_count(self) -> int:
        return sum(len(dests) for dests in self.successors.values())

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Flatten into ``(sources, destinations, weights)`` for vectorised propagation."""
        total = self.edge_count
        sources = np.empty(total, dtype=np.int64)
        destinations = np.empty(total, dtype=np.int64)
        weights = np.empty(total, dtype=np.float64)
        pos = 0
        for key in sorted(self.successors):
            dests = self.successors[key]
            end = pos + len(dests)
            sources[pos:end] = key
            destinations[pos:end] = dests
            weights[pos:end] = 1.0 / len(dests)
            pos = end
        return sources, destinations, weights

    def as_graph(self) -> nx.MultiDiGraph:
        """Multigraph view with one edge per listed move, weighted by its probability."""
        g = nx.MultiDiGraph()
        g.add_nodes_from(self.space.configurations)
        for key, dests in self.successors.items():
            prob = 1.0 / len(dests)
            for dest in dests:
                g.add_edge(key, dest, weight=prob)
        return g


def successors_of(config: Configuration, graph: nx.Graph) -> List[Configuration]:
    """Configurations produced by each legal move from ``config``."""
    return [
        config.with_position(x, y).apply_side_effect()
        for x, y in legal_moves((config.x, config.y), graph)
    ]


def build_transitions(space: StateSpace, grid: nx.Graph | None = None) -> TransitionTable:
    """Derive the successor multiset of every non-terminal configuration."""
    graph = grid if grid is not None else grid_graph(space.problem.grid_size)
    successors: Dict[StateKey, List[StateKey]] = {}
    for config in space.non_terminal():
        key = config.key()
        dests: List[StateKey] = []
        for candidate in successors_of(config, graph):
            dest = candidate.key()
            if not candidate.is_valid() or dest not in space:
                raise InvalidTransitionError(key, candidate)
            dests.append(dest)
        if not dests:
            raise NoTransitionsError(key)
        successors[key] = dests
    return TransitionTable(space=space, successors=successors)


__all__ = ["TransitionTable", "build_transitions", "successors_of"]
