"""Solve the seed-transport chain and write report artifacts."""

from __future__ import annotations

import argparse
from pathlib import Path

from ant_transport.chain.state import ProblemSpec
from ant_transport.errors import NonConvergenceError, ReportWriteError
from ant_transport.eval.plots import plot_absorption, plot_expectation
from ant_transport.eval.report import trace_frame, write_report
from ant_transport.solver.aggregate import default_workers, run_workers
from ant_transport.solver.expectation import SolverConfig


def _log(msg: str) -> None:
    print(f"[solve] {msg}")


# --------------------------------------------------------------------------- CLI
def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    defaults = SolverConfig()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--out", type=Path, required=True, help="Output directory for artifacts.")
    parser.add_argument("--grid-size", type=int, default=5, help="Side length of the square grid.")
    parser.add_argument("--markers", type=int, default=5, help="Markers to carry across.")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads repeating the solve (default: CPU count).",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=defaults.max_steps,
        help="Step budget before a worker reports non-convergence.",
    )
    parser.add_argument(
        "--epsilon",
        type=float,
        default=defaults.epsilon,
        help="A step term below this counts towards convergence.",
    )
    parser.add_argument(
        "--patience",
        type=int,
        default=defaults.patience,
        help="Consecutive sub-epsilon steps required to stop.",
    )
    parser.add_argument(
        "--cumulative-patience",
        action="store_true",
        help="Count sub-epsilon steps without requiring them to be consecutive.",
    )
    parser.add_argument(
        "--decimals", type=int, default=defaults.decimals, help="Rounding of each step term."
    )
    parser.add_argument("--trace", action="store_true", help="Write the per-step trace CSV.")
    parser.add_argument(
        "--plot", action="store_true", help="Plot the absorption trace (implies --trace)."
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        problem = ProblemSpec(grid_size=args.grid_size, markers=args.markers)
        config = SolverConfig(
            max_steps=args.max_steps,
            epsilon=args.epsilon,
            patience=args.patience,
            decimals=args.decimals,
            reset_streak=not args.cumulative_patience,
            record_trace=args.trace or args.plot,
        )
    except ValueError as exc:
        _log(f"invalid arguments: {exc}")
        return 1
    workers = default_workers() if args.workers is None else args.workers
    if workers < 1:
        _log(f"--workers must be positive, got {workers}")
        return 1
    _log(
        f"grid={problem.grid_size}x{problem.grid_size} markers={problem.markers} "
        f"workers={workers} max_steps={config.max_steps}"
    )

    try:
        result = run_workers(workers, problem, config)
    except NonConvergenceError as exc:
        _log(f"no worker converged: {exc}")
        return 1
    for failure in result.failures:
        print(f"[warn] worker {failure.worker} excluded: {failure.message}")

    try:
        paths = write_report(result, args.out)
    except ReportWriteError as exc:
        _log(str(exc))
        return 1

    if args.plot:
        trace = trace_frame(result)
        if trace is not None:
            plot_absorption(trace, args.out)
            plot_expectation(trace, args.out)
            _log(f"wrote plots to {args.out}")

    first = next(iter(result.results.values()))
    _log(
        f"states={first.state_count} terminal={first.terminal_count} "
        f"transitions={first.transition_count}"
    )
    _log(f"expected steps {result.expected_steps:.{config.decimals}f}")
    _log(f"converged after {result.steps_to_converge} steps")
    for name, path in paths.items():
        _log(f"wrote {name} to {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
