"""Cross-platform task runner for ant-transport.

All commands use the currently active Python interpreter (sys.executable) so they work
on POSIX and Windows without Make.
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from datetime import datetime
from pathlib import Path

ARTIFACTS_ENV = "ARTIFACTS"
DEFAULT_ARTIFACTS = "artifacts"


class RunError(Exception):
    """Raised when an invoked command fails."""


def _log(msg: str) -> None:
    print(f"[run] {msg}")


def _run(cmd: list[str], *, env: dict[str, str] | None = None) -> None:
    _log("$ " + " ".join(cmd))
    result = subprocess.run(cmd, env=env)
    if result.returncode != 0:
        raise RunError(f"Command failed with exit code {result.returncode}: {' '.join(cmd)}")


def _artifacts_root() -> Path:
    return Path(os.environ.get(ARTIFACTS_ENV, DEFAULT_ARTIFACTS))


def _latest_solve_run(root: Path | None = None) -> Path | None:
    base = root or (_artifacts_root() / "solve")
    if not base.exists():
        return None
    runs = [p for p in base.iterdir() if p.is_dir() and (p / "summary.json").exists()]
    if not runs:
        return None
    return max(runs, key=lambda p: p.stat().st_mtime)


def cmd_lint(_: argparse.Namespace) -> None:
    _run([sys.executable, "-m", "ruff", "check", "."])
    _run([sys.executable, "-m", "ruff", "format", "--check", "."])


def cmd_format(_: argparse.Namespace) -> None:
    _run([sys.executable, "-m", "ruff", "format", "."])
    _run([sys.executable, "-m", "ruff", "check", "--fix", "."])


def cmd_test(args: argparse.Namespace) -> None:
    pytest_cmd = [sys.executable, "-m", "pytest"]
    if args.quiet:
        pytest_cmd.append("-q")
    _run(pytest_cmd)


def cmd_solve(args: argparse.Namespace) -> None:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_dir = args.out or (_artifacts_root() / "solve" / stamp)
    cmd = [
        sys.executable,
        "-m",
        "ant_transport.eval.run_solve",
        "--out",
        str(out_dir),
        "--grid-size",
        str(args.grid_size),
        "--markers",
        str(args.markers),
    ]
    if args.workers is not None:
        cmd += ["--workers", str(args.workers)]
    if args.max_steps is not None:
        cmd += ["--max-steps", str(args.max_steps)]
    if args.plot:
        cmd.append("--plot")
    elif args.trace:
        cmd.append("--trace")
    _run(cmd)
    _log(f"solve artifacts in {out_dir}")


def cmd_invariants(args: argparse.Namespace) -> None:
    out_dir = args.out or (_artifacts_root() / "invariants")
    cmd = [
        sys.executable,
        "-m",
        "ant_transport.eval.invariants",
        "--out",
        str(out_dir),
        "--grid-size",
        str(args.grid_size),
        "--markers",
        str(args.markers),
    ]
    if args.expected_states is not None:
        cmd += ["--expected-states", str(args.expected_states)]
    _run(cmd)


def cmd_gate(args: argparse.Namespace) -> None:
    summary = args.summary
    if summary is None:
        latest = _latest_solve_run()
        if latest is None:
            raise RunError("No solve runs found; run `solve` first or pass --summary")
        summary = latest / "summary.json"
    cmd = [
        sys.executable,
        "-m",
        "ant_transport.eval.regression_checks",
        "--summary",
        str(summary),
    ]
    if args.require_all_workers:
        cmd.append("--require-all-workers")
    _run(cmd)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    lint_p = sub.add_parser("lint", help="Run ruff checks")
    lint_p.set_defaults(func=cmd_lint)

    fmt_p = sub.add_parser("format", help="Apply ruff format and fixes")
    fmt_p.set_defaults(func=cmd_format)

    test_p = sub.add_parser("test", help="Run pytest")
    test_p.add_argument("--quiet", action="store_true", help="Quiet pytest output")
    test_p.set_defaults(func=cmd_test)

    solve_p = sub.add_parser("solve", help="Solve the chain and write a report")
    solve_p.add_argument("--grid-size", type=int, default=5)
    solve_p.add_argument("--markers", type=int, default=5)
    solve_p.add_argument("--workers", type=int, help="Worker threads (default: CPU count)")
    solve_p.add_argument("--max-steps", type=int, help="Override the step budget")
    solve_p.add_argument("--trace", action="store_true", help="Write the per-step trace")
    solve_p.add_argument("--plot", action="store_true", help="Also plot the trace")
    solve_p.add_argument("--out", type=Path, help="Output directory (default: timestamped)")
    solve_p.set_defaults(func=cmd_solve)

    inv = sub.add_parser("invariants", help="Run structural checks on the state space")
    inv.add_argument("--grid-size", type=int, default=5)
    inv.add_argument("--markers", type=int, default=5)
    inv.add_argument("--expected-states", type=int, help="Required configuration count")
    inv.add_argument("--out", type=Path, help="Output directory for report")
    inv.set_defaults(func=cmd_invariants)

    gate = sub.add_parser("gate", help="Compare a solve summary against the golden value")
    gate.add_argument(
        "--summary", type=Path, help="Path to summary.json (defaults to latest solve run)"
    )
    gate.add_argument("--require-all-workers", action="store_true")
    gate.set_defaults(func=cmd_gate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except RunError as exc:  # pragma: no cover - simple CLI error
        _log(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
