import json

import pandas as pd
import pytest

from ant_transport.chain.state import ProblemSpec
from ant_transport.errors import ReportWriteError
from ant_transport.eval import run_solve
from ant_transport.eval.report import format_report, write_report
from ant_transport.solver.aggregate import run_workers
from ant_transport.solver.expectation import SolverConfig

SMALL = ProblemSpec(grid_size=3, markers=3)


@pytest.fixture(scope="module")
def aggregate():
    return run_workers(2, SMALL, SolverConfig(record_trace=True))


def test_format_report_has_three_labelled_lines(aggregate):
    lines = [line for line in format_report(aggregate).splitlines() if line]
    assert lines[0] == "Number of workers: 2"
    assert lines[1] == f"Expected number of steps: {aggregate.expected_steps:.6f}"
    assert lines[2].endswith(f": {aggregate.steps_to_converge}")
    assert len(lines) == 3


def test_write_report_creates_artifacts(aggregate, tmp_path):
    out_dir = tmp_path / "run"
    paths = write_report(aggregate, out_dir)

    assert set(paths) == {"report", "workers", "summary", "trace"}
    workers = pd.read_csv(paths["workers"])
    assert list(workers["worker"]) == [0, 1]
    assert set(workers["status"]) == {"converged"}

    summary = json.loads(paths["summary"].read_text())
    assert summary["workers"] == 2
    assert summary["expected_steps"] == pytest.approx(aggregate.expected_steps)
    assert "numpy_version" in summary["metadata"]

    trace = pd.read_csv(paths["trace"])
    assert len(trace) == aggregate.results[0].steps_to_converge


def test_write_report_wraps_io_errors(aggregate, tmp_path):
    blocker = tmp_path / "occupied"
    blocker.write_text("not a directory")
    with pytest.raises(ReportWriteError):
        write_report(aggregate, blocker)


def test_run_solve_cli_writes_report_and_plots(tmp_path):
    out_dir = tmp_path / "cli"
    exit_code = run_solve.main(
        [
            "--out",
            str(out_dir),
            "--grid-size",
            "3",
            "--markers",
            "3",
            "--workers",
            "2",
            "--plot",
        ]
    )

    assert exit_code == 0
    assert (out_dir / "report.txt").exists()
    assert (out_dir / "trace.csv").exists()
    assert (out_dir / "absorption.png").exists()
    assert (out_dir / "expectation.pdf").exists()


def test_run_solve_cli_reports_non_convergence(tmp_path):
    exit_code = run_solve.main(
        ["--out", str(tmp_path / "cli"), "--grid-size", "3", "--markers", "3", "--max-steps", "5"]
    )
    assert exit_code == 1
    assert not (tmp_path / "cli" / "report.txt").exists()


@pytest.mark.parametrize(
    "extra",
    [
        ["--workers", "0"],
        ["--workers", "-2"],
        ["--grid-size", "1"],
        ["--markers", "4"],
        ["--patience", "0"],
    ],
)
def test_run_solve_cli_rejects_bad_arguments(tmp_path, capsys, extra):
    out_dir = tmp_path / "cli"
    argv = ["--out", str(out_dir), "--grid-size", "3", "--markers", "3", *extra]
    assert run_solve.main(argv) == 1
    assert not out_dir.exists()
    assert "[solve]" in capsys.readouterr().out


def test_run_solve_cli_cumulative_patience(tmp_path):
    out_dir = tmp_path / "cli"
    argv = ["--out", str(out_dir), "--grid-size", "3", "--markers", "3", "--workers", "1"]
    assert run_solve.main([*argv, "--cumulative-patience"]) == 0
    summary = json.loads((out_dir / "summary.json").read_text())
    assert summary["reset_streak"] is False
    assert summary["workers"] == 1
