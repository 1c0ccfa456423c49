"""Structural invariant checks on the state space and transition table."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

import networkx as nx

from ant_transport.chain.grid import grid_graph, move_count
from ant_transport.chain.space import StateSpace, candidate_configurations, enumerate_states
from ant_transport.chain.state import ProblemSpec, decode_key
from ant_transport.chain.transitions import TransitionTable, build_transitions

_SINK = "absorbed"


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--out", type=Path, required=True, help="Output directory for the report.")
    parser.add_argument("--grid-size", type=int, default=5)
    parser.add_argument("--markers", type=int, default=5)
    parser.add_argument(
        "--expected-states",
        type=int,
        help="Fail unless the enumeration yields exactly this many configurations.",
    )
    return parser.parse_args(argv)


def _state_count(space: StateSpace, expected: int | None) -> list[dict]:
    issues = []
    valid = sum(1 for config in candidate_configurations(space.problem) if config.is_valid())
    if valid != len(space):
        issues.append({"type": "duplicate_keys", "valid": valid, "enumerated": len(space)})
    if expected is not None and len(space) != expected:
        issues.append({"type": "state_count", "expected": expected, "actual": len(space)})
    return issues


def _encoding(space: StateSpace) -> list[dict]:
    issues = []
    for key, config in space.configurations.items():
        if not config.is_valid():
            issues.append({"type": "invalid_state", "key": key})
        elif config.key() != key or decode_key(key, space.problem) != config:
            issues.append({"type": "encoding", "key": key})
    return issues


def _endpoints(space: StateSpace) -> list[dict]:
    issues = []
    if space.initial_key not in space:
        issues.append({"type": "initial_missing", "key": space.initial_key})
    if not space.terminal_keys:
        issues.append({"type": "terminal_missing"})
    for key in space.terminal_keys:
        if not space[key].is_terminal():
            issues.append({"type": "terminal_mismatch", "key": key})
    return issues


def _transition_targets(table: TransitionTable) -> list[dict]:
    issues = []
    space = table.space
    for key, dests in table.successors.items():
        if space[key].is_terminal():
            issues.append({"type": "terminal_has_moves", "key": key})
        for dest in dests:
            if dest not in space or not space[dest].is_valid():
                issues.append({"type": "invalid_target", "key": key, "target": dest})
    return issues


def _move_degrees(grid: nx.Graph, grid_size: int) -> list[dict]:
    issues = []
    last = grid_size - 1
    for x in range(grid_size):
        for y in range(grid_size):
            on_edge = (x in (0, last)) + (y in (0, last))
            expected = 4 - on_edge
            actual = move_count((x, y), grid)
            if actual != expected:
                issues.append(
                    {"type": "move_degree", "cell": (x, y), "expected": expected, "actual": actual}
                )
    return issues


def _absorbing(table: TransitionTable) -> list[dict]:
    """Every configuration must be able to reach a terminal one."""
    graph = nx.DiGraph(table.as_graph())
    graph.add_edges_from((key, _SINK) for key in table.space.terminal_keys)
    reaching = nx.ancestors(graph, _SINK)
    stuck = [key for key in table.successors if key not in reaching]
    if not stuck:
        return []
    return [{"type": "not_absorbing", "count": len(stuck), "example": stuck[0]}]


def _summarize(issues: Iterable[dict], space: StateSpace, table: TransitionTable) -> dict:
    issues_list = list(issues)
    grouped: dict[str, int] = {}
    for item in issues_list:
        grouped[item["type"]] = grouped.get(item["type"], 0) + 1
    return {
        "grid_size": space.problem.grid_size,
        "markers": space.problem.markers,
        "states": len(space),
        "terminal_states": len(space.terminal_keys),
        "transitions": table.edge_count,
        "issues": issues_list,
        "counts": grouped,
        "passed": len(issues_list) == 0,
    }


def check_invariants(problem: ProblemSpec, expected_states: int | None = None) -> dict:
    space = enumerate_states(problem)
    grid = grid_graph(problem.grid_size)
    table = build_transitions(space, grid)
    issues = []
    issues.extend(_state_count(space, expected_states))
    issues.extend(_encoding(space))
    issues.extend(_endpoints(space))
    issues.extend(_transition_targets(table))
    issues.extend(_move_degrees(grid, problem.grid_size))
    issues.extend(_absorbing(table))
    return _summarize(issues, space, table)


def _write_report(out_dir: Path, summary: dict) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    report_lines = [
        "# Invariants Report",
        "",
        f"- Grid: {summary['grid_size']}x{summary['grid_size']}, markers: {summary['markers']}",
        f"- States: {summary['states']} ({summary['terminal_states']} terminal)",
        f"- Transitions: {summary['transitions']}",
    ]
    if summary["passed"]:
        report_lines.append("- All invariants passed.")
    else:
        report_lines.append(f"- Issues found: {summary['counts']}")
        for issue in summary["issues"]:
            parts = [issue["type"]]
            for key, val in issue.items():
                if key == "type":
                    continue
                parts.append(f"{key}={val}")
            report_lines.append(f"  - {'; '.join(parts)}")
    (out_dir / "report.md").write_text("\n".join(report_lines))
    (out_dir / "summary.json").write_text(json.dumps(summary, indent=2))


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    problem = ProblemSpec(grid_size=args.grid_size, markers=args.markers)
    summary = check_invariants(problem, expected_states=args.expected_states)
    _write_report(args.out, summary)
    print(f"[invariants] wrote report to {args.out}")
    if not summary["passed"]:
        print(f"[invariants] failed: {summary['counts']}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
