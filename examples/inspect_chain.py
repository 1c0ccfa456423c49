"""Inspect the transition structure of a small chain with networkx."""

from __future__ import annotations

from collections import Counter

import networkx as nx

from ant_transport import ProblemSpec, build_transitions, decode_key, enumerate_states


def main() -> None:
    problem = ProblemSpec(grid_size=3, markers=3)
    width = problem.grid_size
    space = enumerate_states(problem)
    table = build_transitions(space)
    graph = nx.DiGraph(table.as_graph())

    print(f"states={len(space)} terminal={len(space.terminal_keys)} moves={table.edge_count}")
    print("start:", space.initial)

    degrees = Counter(table.out_degree(key) for key in table.successors)
    print("out-degree histogram:", dict(sorted(degrees.items())))

    target = space.terminal_keys[0]
    path = nx.shortest_path(graph, space.initial_key, target)
    print(f"shortest walk to {decode_key(target, problem)}: {len(path) - 1} moves")
    for key in path:
        config = decode_key(key, problem)
        print(
            f"  ({config.x}, {config.y}) carrying={config.carrying} "
            f"source={config.source:0{width}b} target={config.target:0{width}b}"
        )


if __name__ == "__main__":
    main()
