"""Report artifacts for an aggregated solve."""

from __future__ import annotations

import json
import os
import platform
import sys
from pathlib import Path

import networkx as nx
import numpy as np
import pandas as pd

from ant_transport.errors import ReportWriteError
from ant_transport.solver.aggregate import AggregateResult

REPORT_NAME = "report.txt"
WORKERS_NAME = "workers.csv"
SUMMARY_NAME = "summary.json"
TRACE_NAME = "trace.csv"


def collect_metadata() -> dict[str, object]:
    return {
        "python_version": sys.version,
        "numpy_version": np.__version__,
        "networkx_version": nx.__version__,
        "pandas_version": pd.__version__,
        "platform": platform.platform(),
        "machine": platform.machine(),
        "processor": platform.processor(),
        "cpu_count": os.cpu_count(),
    }


def format_report(result: AggregateResult) -> str:
    """Three labelled lines: worker count, expected steps, convergence steps."""
    decimals = result.config.decimals
    lines = [
        f"Number of workers: {result.workers}",
        "",
        f"Expected number of steps: {result.expected_steps:.{decimals}f}",
        "",
        f"Total number of runs needed for solution convergence: {result.steps_to_converge}",
    ]
    return "\n".join(lines) + "\n"


def trace_frame(result: AggregateResult) -> pd.DataFrame | None:
    """Per-step trace of the first converged worker, if one was recorded."""
    for worker_result in result.results.values():
        if worker_result.trace:
            return pd.DataFrame(worker_result.trace_records())
    return None


def write_report(result: AggregateResult, out_dir: Path) -> dict[str, Path]:
    """Write report, per-worker CSV, summary JSON and optional trace into ``out_dir``."""
    out_dir = Path(out_dir)
    paths = {
        "report": out_dir / REPORT_NAME,
        "workers": out_dir / WORKERS_NAME,
        "summary": out_dir / SUMMARY_NAME,
    }
    summary = result.summary()
    summary["metadata"] = collect_metadata()
    trace = trace_frame(result)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        paths["report"].write_text(format_report(result))
        pd.DataFrame(result.as_records()).to_csv(paths["workers"], index=False)
        paths["summary"].write_text(json.dumps(summary, indent=2))
        if trace is not None:
            paths["trace"] = out_dir / TRACE_NAME
            trace.to_csv(paths["trace"], index=False)
    except OSError as exc:
        msg = f"Unable to write report to {out_dir}: {exc}"
        raise ReportWriteError(msg) from exc
    return paths


__all__ = ["collect_metadata", "format_report", "trace_frame", "write_report"]
