import json

import pandas as pd
import pytest

from ant_transport.chain.state import ProblemSpec
from ant_transport.eval import invariants, plots, regression_checks
from ant_transport.eval.regression_checks import (
    DEFAULT_TOLERANCE,
    GOLDEN_EXPECTED_STEPS,
    _gate_failures,
)


def _gate(summary, **overrides):
    kwargs = {
        "expected": GOLDEN_EXPECTED_STEPS,
        "tolerance": DEFAULT_TOLERANCE,
        "max_steps_to_converge": None,
        "require_all_workers": False,
    }
    kwargs.update(overrides)
    return _gate_failures(summary, **kwargs)


def test_default_problem_passes_invariants():
    summary = invariants.check_invariants(ProblemSpec(), expected_states=10270)
    assert summary["passed"], summary["counts"]
    assert summary["states"] == 10270
    assert summary["terminal_states"] == 5


def test_wrong_state_count_is_reported():
    summary = invariants.check_invariants(ProblemSpec(grid_size=3, markers=3), expected_states=1)
    assert not summary["passed"]
    assert summary["counts"] == {"state_count": 1}


def test_invariants_cli_writes_report(tmp_path):
    exit_code = invariants.main(["--out", str(tmp_path), "--grid-size", "3", "--markers", "3"])
    assert exit_code == 0
    assert "All invariants passed." in (tmp_path / "report.md").read_text()
    summary = json.loads((tmp_path / "summary.json").read_text())
    assert summary["passed"] is True


def test_gate_accepts_golden_value():
    summary = {"expected_steps": 430.088222, "steps_to_converge": 4000, "failures": []}
    assert _gate(summary) == []
    assert _gate(summary, max_steps_to_converge=10_000, require_all_workers=True) == []


@pytest.mark.parametrize(
    "summary,overrides,fragment",
    [
        ({"steps_to_converge": 10}, {}, "Missing fields"),
        ({"expected_steps": 431.0, "steps_to_converge": 10}, {}, "differs"),
        (
            {"expected_steps": 430.088222, "steps_to_converge": 20_000},
            {"max_steps_to_converge": 10_000},
            "> 10000",
        ),
        (
            {
                "expected_steps": 430.088222,
                "steps_to_converge": 10,
                "failures": [{"worker": 3}, {"worker": 1}],
            },
            {"require_all_workers": True},
            "[1, 3]",
        ),
    ],
)
def test_gate_failures(summary, overrides, fragment):
    failures = _gate(summary, **overrides)
    assert len(failures) == 1
    assert fragment in failures[0]


def test_gate_cli(tmp_path):
    path = tmp_path / "summary.json"
    assert regression_checks.main(["--summary", str(path)]) == 1

    path.write_text(json.dumps({"expected_steps": 430.088222, "steps_to_converge": 1892}))
    assert regression_checks.main(["--summary", str(path)]) == 0
    assert regression_checks.main(["--summary", str(path), "--expected", "400"]) == 1

    # The exact absorption time is outside the default tolerance of the rounded pipeline.
    path.write_text(json.dumps({"expected_steps": 430.088247, "steps_to_converge": 1892}))
    assert regression_checks.main(["--summary", str(path)]) == 1
    assert regression_checks.main(["--summary", str(path), "--tolerance", "1e-4"]) == 0


def test_plots_cli(tmp_path):
    trace = tmp_path / "trace.csv"
    pd.DataFrame(
        {
            "step": [1, 2, 3, 4],
            "absorbed_mass": [0.0, 0.25, 0.5, 0.25],
            "term": [0.0, 0.5, 1.5, 1.0],
            "expected_steps": [0.0, 0.5, 2.0, 3.0],
            "circulating_mass": [1.0, 0.75, 0.25, 0.0],
        }
    ).to_csv(trace, index=False)

    assert plots.main(["--trace", str(trace), "--out", str(tmp_path / "figs")]) == 0
    for name in ("absorption", "expectation"):
        assert (tmp_path / "figs" / f"{name}.png").exists()
        assert (tmp_path / "figs" / f"{name}.pdf").exists()


def test_plots_reject_incomplete_trace(tmp_path):
    with pytest.raises(ValueError):
        plots.plot_expectation(pd.DataFrame({"step": [1]}), tmp_path)
