"""Quick comparison of expected walk length across grid sizes."""

from __future__ import annotations

from ant_transport import ProblemSpec, SolverConfig, solve


def _print_result(label: str, result) -> None:
    print(
        f"{label}: states={result.state_count}, transitions={result.transition_count}, "
        f"expected_steps={result.expected_steps:.6f}, "
        f"converged_after={result.steps_to_converge}, runtime_s={result.runtime_s:.2f}"
    )


def main() -> None:
    config = SolverConfig(max_steps=50_000)
    for n in (2, 3, 4, 5):
        result = solve(ProblemSpec(grid_size=n, markers=n), config)
        _print_result(f"{n}x{n}", result)


if __name__ == "__main__":
    main()
