"""Grid move graph for the walking agent."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, List, Tuple

import networkx as nx

from ant_transport.chain.state import Position

Direction = Tuple[int, int]

# Order matters only for reproducible transition lists.
DIRECTIONS: Dict[str, Direction] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


def grid_graph(grid_size: int) -> nx.Graph:
    """Square lattice with nodes ``(x, y)`` and edges between orthogonal neighbours."""
    if grid_size < 1:
        msg = f"grid_size must be positive, got {grid_size}."
        raise ValueError(msg)
    return _cached_grid(grid_size).copy()


@lru_cache(maxsize=None)
def _cached_grid(grid_size: int) -> nx.Graph:
    g = nx.Graph()
    for x in range(grid_size):
        for y in range(grid_size):
            g.add_node((x, y))
            if x + 1 < grid_size:
                g.add_edge((x, y), (x + 1, y))
            if y + 1 < grid_size:
                g.add_edge((x, y), (x, y + 1))
    return g


def legal_moves(position: Position, graph: nx.Graph) -> List[Position]:
    """Destinations reachable in one move, in up/down/left/right order."""
    if position not in graph:
        return []
    x, y = position
    moves: List[Position] = []
    for dx, dy in DIRECTIONS.values():
        dest = (x + dx, y + dy)
        if graph.has_edge(position, dest):
            moves.append(dest)
    return moves


def move_count(position: Position, graph: nx.Graph) -> int:
    return len(legal_moves(position, graph))


def block_cell(graph: nx.Graph, cell: Position) -> nx.Graph:
    """Return a copy of ``graph`` where ``cell`` cannot be entered or left."""
    blocked = graph.copy()
    if cell in blocked:
        blocked.remove_edges_from(list(blocked.edges(cell)))
    return blocked


__all__ = ["DIRECTIONS", "block_cell", "grid_graph", "legal_moves", "move_count"]
