from __future__ import annotations

from rich import box
from rich.console import Console
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from p2lens.contracts import Reporter
from p2lens.models import (
    ConvergenceReport,
    MarkerSnapshot,
    TrialResult,
    TrialsReport,
)


class RichReporter(Reporter):
    """Render harness results using Rich tables."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def render_trials(self, report: TrialsReport) -> None:
        self._console.print()
        self._console.print(f"Trials for p={report.p}", style="bold underline")
        self._console.print(Rule(style="dim"))
        self._console.print(self._build_trials_settings(report))
        self._console.print()

        self._console.print("Estimates", style="bold")
        self._console.print(Rule(style="dim"))
        shown = [
            trial
            for trial in report.trials
            if trial.iteration == 1 or trial.iteration % report.report_every == 0
        ]
        self._console.print(self._build_trials_table(shown, report.p))
        self._console.print()

        self._console.print("Summary", style="bold")
        self._console.print(Rule(style="dim"))
        summary = Table.grid(padding=(0, 3))
        summary.add_column("Metric", style="bold cyan")
        summary.add_column("Value")
        summary.add_row(f"exact quantile (p={report.p}):", f"{report.exact:.6f}")
        summary.add_row("average estimate:", f"{report.mean_estimate:.6f}")
        summary.add_row("difference:", f"{report.difference:.6f}")
        self._console.print(summary)

    def render_convergence(self, report: ConvergenceReport) -> None:
        self._console.print()
        self._console.print(
            f"Convergence for p={report.p}", style="bold underline"
        )
        self._console.print(Rule(style="dim"))

        settings = Table.grid(padding=(0, 3))
        settings.add_column("Field", style="bold cyan")
        settings.add_column("Value")
        settings.add_row("distribution:", report.distribution)
        settings.add_row("seed:", str(report.seed))
        settings.add_row("policy:", report.policy)
        self._console.print(settings)
        self._console.print()

        table = Table(
            box=box.SIMPLE_HEAD,
            show_header=True,
            header_style="bold",
            expand=True,
            padding=(0, 2),
        )
        table.add_column("Samples", justify="right", ratio=1)
        table.add_column("Markers", ratio=5)
        table.add_column("Estimate", justify="right", ratio=2)
        table.add_column("Exact", justify="right", ratio=2)
        table.add_column("Difference", justify="right", ratio=2)
        table.add_column("Relative error", justify="right", ratio=2)

        for point in report.points:
            table.add_row(
                f"{point.count:,}",
                self._format_markers(point.markers),
                f"{point.estimate:.4f}",
                f"{point.exact:.4f}",
                f"{point.abs_error:.4f}",
                self._format_relative_error(point.rel_error),
            )
        self._console.print(table)

    @staticmethod
    def _build_trials_settings(report: TrialsReport) -> Table:
        table = Table.grid(padding=(0, 3))
        table.add_column("Field", style="bold cyan")
        table.add_column("Value")
        table.add_row("iterations:", f"{report.iterations:,}")
        table.add_row("dataset:", f"{report.dataset_size:,}")
        table.add_row("distribution:", report.distribution)
        table.add_row("policy:", report.policy)
        return table

    @staticmethod
    def _build_trials_table(trials: list[TrialResult], p: float) -> Table:
        table = Table(
            box=box.SIMPLE_HEAD,
            show_header=True,
            header_style="bold",
            expand=True,
            padding=(0, 2),
        )
        table.add_column("Iteration", justify="right", ratio=1)
        table.add_column("Current average", justify="right", ratio=2)
        table.add_column(f"Final estimate for p={p}", justify="right", ratio=2)
        for trial in trials:
            table.add_row(
                str(trial.iteration),
                f"{trial.running_mean:.6f}",
                f"{trial.estimate:.6f}",
            )
        return table

    @staticmethod
    def _format_markers(markers: MarkerSnapshot) -> Text:
        values = ", ".join(f"{value:.4g}" for value in markers.as_tuple())
        return Text(f"[{values}]")

    @staticmethod
    def _format_relative_error(rel_error: float) -> Text:
        style = "green" if rel_error <= 0.01 else "yellow"
        return Text(f"{rel_error:.2%}", style=style)
