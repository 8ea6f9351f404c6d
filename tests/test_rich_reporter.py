from __future__ import annotations

from rich.console import Console

from p2lens.models import (
    ConvergencePoint,
    ConvergenceReport,
    MarkerSnapshot,
    TrialResult,
    TrialsReport,
)
from p2lens.reporters import RichReporter


def _console(width: int = 120) -> Console:
    return Console(
        record=True,
        force_terminal=False,
        color_system=None,
        width=width,
    )


def _trials_report() -> TrialsReport:
    estimates = [7.0, 8.0, 9.0, 10.0]
    trials = [
        TrialResult(
            iteration=index,
            estimate=estimate,
            running_mean=sum(estimates[:index]) / index,
        )
        for index, estimate in enumerate(estimates, start=1)
    ]
    return TrialsReport(
        p=0.75,
        dataset_size=100,
        iterations=4,
        report_every=2,
        distribution="shuffled",
        policy="markers",
        trials=trials,
        exact=8.25,
        mean_estimate=8.5,
        difference=0.25,
    )


def test_render_trials_shows_first_and_every_nth_iteration() -> None:
    console = _console()

    RichReporter(console).render_trials(_trials_report())

    output = console.export_text()
    assert "Trials for p=0.75" in output
    assert "Final estimate for p=0.75" in output
    assert "7.000000" in output
    assert "8.000000" in output
    # Iteration 3 is neither first nor a multiple of report_every.
    assert "9.000000" not in output
    assert "10.000000" in output
    assert "exact quantile (p=0.75):" in output
    assert "8.250000" in output
    assert "0.250000" in output


def test_render_convergence_lists_checkpoints() -> None:
    console = _console(width=160)
    markers = MarkerSnapshot(min=1.0, q1=250.0, median=500.0, q3=750.0, max=1000.0)
    report = ConvergenceReport(
        p=0.5,
        seed=1,
        distribution="shuffled",
        policy="markers",
        points=[
            ConvergencePoint(
                count=1000,
                markers=markers,
                estimate=499.0,
                exact=500.5,
                abs_error=1.5,
                rel_error=1.5 / 500.5,
            )
        ],
    )

    RichReporter(console).render_convergence(report)

    output = console.export_text()
    assert "Convergence for p=0.5" in output
    assert "1,000" in output
    assert "[1, 250, 500, 750, 1000]" in output
    assert "499.0000" in output
    assert "0.30%" in output
