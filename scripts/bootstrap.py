"""Cross-platform project bootstrap: create venv and install dependencies."""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path


DEFAULT_VENV_DIR = ".venv"
VENV_ENV_VAR = "ANT_TRANSPORT_VENV_DIR"


class BootstrapError(Exception):
    """Custom error for bootstrap failures."""


def _log(msg: str) -> None:
    print(f"[bootstrap] {msg}")


def _run(
    cmd: list[str], *, env: dict[str, str] | None = None, check: bool = True
) -> subprocess.CompletedProcess:
    _log("$ " + " ".join(cmd))
    return subprocess.run(cmd, check=check, env=env)


def _venv_python(venv_dir: Path) -> Path:
    candidates = [
        venv_dir / "bin" / "python3",
        venv_dir / "bin" / "python",
        venv_dir / "Scripts" / "python.exe",
        venv_dir / "Scripts" / "python",
    ]
    for path in candidates:
        if path.exists():
            return path
    raise BootstrapError(f"Unable to find python inside venv at {venv_dir}")


def _ensure_venv(venv_dir: Path) -> Path:
    if not venv_dir.exists():
        _log(f"creating venv at {venv_dir}")
        _run([sys.executable, "-m", "venv", str(venv_dir)])
    else:
        _log(f"using existing venv at {venv_dir}")
    return _venv_python(venv_dir)


def _pip_install(py: Path, packages: list[str]) -> None:
    if not packages:
        return
    _run([str(py), "-m", "pip", "install", "-U", *packages])


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--dev", action="store_true", help="Install dev tools (ruff, pytest, pytest-cov)"
    )
    parser.add_argument(
        "--venv",
        dest="venv_dir",
        type=Path,
        default=None,
        help=f"Override venv directory (defaults to {VENV_ENV_VAR} or .venv)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    venv_dir = args.venv_dir or Path(os.environ.get(VENV_ENV_VAR, DEFAULT_VENV_DIR))
    py = _ensure_venv(venv_dir)

    _pip_install(py, ["pip", "setuptools", "wheel"])

    base_packages = [
        "numpy",
        "pandas",
        "matplotlib",
        "networkx",
    ]
    _pip_install(py, base_packages)

    if args.dev:
        dev_packages = ["ruff", "pytest", "pytest-cov"]
        _pip_install(py, dev_packages)

    # Install project editable
    _run([str(py), "-m", "pip", "install", "-e", "."])

    _log(f"venv python: {py}")
    _log("Next steps:")
    _log(f"  {py} scripts/run.py test")
    _log(f"  {py} scripts/run.py solve --plot")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
