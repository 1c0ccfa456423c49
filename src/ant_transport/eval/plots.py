"""Plotting utilities for the absorption trace."""

from __future__ import annotations

import argparse
from pathlib import Path

import matplotlib
import matplotlib.pyplot as plt
import pandas as pd

matplotlib.use("Agg")

TRACE_COLUMNS = {"step", "absorbed_mass", "term", "expected_steps"}


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--trace", type=Path, required=True, help="Input trace CSV.")
    parser.add_argument("--out", dest="out", type=Path, required=True, help="Output directory.")
    return parser.parse_args(argv)


def _check_columns(df: pd.DataFrame) -> None:
    missing = TRACE_COLUMNS - set(df.columns)
    if missing:
        msg = f"trace missing required columns: {sorted(missing)}"
        raise ValueError(msg)


def _save(fig, out_dir: Path, fname: str) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for ext in ("png", "pdf"):
        path = out_dir / f"{fname}.{ext}"
        fig.savefig(path, dpi=200)
        paths.append(path)
    plt.close(fig)
    return paths


def plot_absorption(df: pd.DataFrame, out_dir: Path) -> list[Path]:
    """Probability of finishing at exactly step t, log scale."""
    _check_columns(df)
    positive = df[df["absorbed_mass"] > 0]
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.plot(positive["step"], positive["absorbed_mass"], color="#4c78a8")
    ax.set_yscale("log")
    ax.set_xlabel("Step")
    ax.set_ylabel("P(absorbed at step)")
    ax.set_title("Absorption probability per step")
    fig.tight_layout()
    return _save(fig, out_dir, "absorption")


def plot_expectation(df: pd.DataFrame, out_dir: Path) -> list[Path]:
    """Running expectation against step count."""
    _check_columns(df)
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.plot(df["step"], df["expected_steps"], color="#f58518")
    final = float(df["expected_steps"].iloc[-1])
    ax.axhline(final, color="#72b7b2", linestyle="--", label=f"E[steps] = {final:.6f}")
    ax.set_xlabel("Step")
    ax.set_ylabel("Accumulated expectation")
    ax.legend()
    fig.tight_layout()
    return _save(fig, out_dir, "expectation")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    df = pd.read_csv(args.trace)
    plot_absorption(df, args.out)
    plot_expectation(df, args.out)
    print(f"[plots] wrote figures to {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
