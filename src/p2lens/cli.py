from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from p2lens.config import DEFAULT_CHECKPOINTS, ConvergenceConfig, TrialsConfig
from p2lens.errors import InsufficientDataError, InvalidQuantileError
from p2lens.harness import QuantileHarness
from p2lens.models import MarkerAdjustment, MarkerSnapshot
from p2lens.observers import RecordingMarkerObserver
from p2lens.p2_quantile import QUERY_POLICIES, P2QuantileEstimator
from p2lens.reporters import RichReporter
from p2lens.sources import DISTRIBUTIONS, TextSampleSource

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _parse_checkpoints(text: str) -> tuple[int, ...]:
    try:
        return tuple(int(part) for part in text.split(",") if part.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected comma-separated integers, got {text!r}"
        ) from None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="p2lens", description="Streaming P² quantile estimation"
    )
    parser.add_argument(
        "--log-level",
        choices=_LOG_LEVELS,
        default="WARNING",
        help="Logging verbosity (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    estimate = subparsers.add_parser(
        "estimate", help="Estimate a quantile of numbers read one per line"
    )
    estimate.add_argument(
        "path",
        nargs="?",
        default="-",
        help="File with one number per line, or '-' for stdin (default)",
    )
    estimate.add_argument("--p", type=float, default=0.5, help="Target quantile")
    estimate.add_argument(
        "--policy", choices=QUERY_POLICIES, default="markers", help="Query policy"
    )
    estimate.add_argument(
        "--show-markers", action="store_true", help="Print the five markers"
    )
    estimate.add_argument(
        "--trace", action="store_true", help="Print every marker adjustment"
    )

    trials = subparsers.add_parser(
        "trials", help="Average estimates over independent seeded trials"
    )
    trials.add_argument("--p", type=float, default=0.75)
    trials.add_argument("--dataset", type=int, default=10_000)
    trials.add_argument("--iterations", type=int, default=200)
    trials.add_argument("--report-every", type=int, default=10)
    trials.add_argument("--distribution", choices=DISTRIBUTIONS, default="shuffled")
    trials.add_argument(
        "--workers", type=int, default=None, help="Worker threads (default: auto)"
    )
    trials.add_argument("--policy", choices=QUERY_POLICIES, default="markers")

    converge = subparsers.add_parser(
        "converge", help="Track one estimator against the exact quantile"
    )
    converge.add_argument("--p", type=float, default=0.75)
    converge.add_argument(
        "--checkpoints",
        type=_parse_checkpoints,
        default=DEFAULT_CHECKPOINTS,
        help="Comma-separated sample counts (default: 100,500,1000,2500,5000,10000)",
    )
    converge.add_argument("--seed", type=int, default=1)
    converge.add_argument(
        "--distribution", choices=DISTRIBUTIONS, default="shuffled"
    )
    converge.add_argument("--policy", choices=QUERY_POLICIES, default="markers")
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        format=_LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger().setLevel(level)


def _render_markers(console: Console, markers: MarkerSnapshot) -> None:
    table = Table(title="Markers")
    table.add_column("Marker", style="bold")
    table.add_column("Value")
    for name, value in markers.model_dump().items():
        table.add_row(name, f"{value:.6f}")
    console.print(table)


def _render_trace(console: Console, adjustments: list[MarkerAdjustment]) -> None:
    table = Table(title=f"Adjustments ({len(adjustments)})")
    table.add_column("Sample", justify="right")
    table.add_column("Marker", justify="right")
    table.add_column("Step", justify="right")
    table.add_column("Method")
    table.add_column("Value")
    table.add_column("Position")
    for event in adjustments:
        table.add_row(
            str(event.count),
            str(event.index),
            f"{event.step:+d}",
            event.method,
            f"{event.old_value:.6f} -> {event.new_value:.6f}",
            f"{event.old_position:.0f} -> {event.new_position:.0f}",
        )
    console.print(table)


def _run_estimate(
    args: argparse.Namespace, *, console: Console, stdin: TextIO
) -> int:
    recorder = RecordingMarkerObserver() if args.trace else None
    try:
        estimator = P2QuantileEstimator(args.p, observer=recorder)
    except InvalidQuantileError as exc:
        console.print(str(exc), markup=False)
        return 2

    try:
        if args.path == "-":
            estimator.ingest_many(TextSampleSource(stdin).iter_samples())
        else:
            with Path(args.path).open(encoding="utf-8") as handle:
                estimator.ingest_many(TextSampleSource(handle).iter_samples())
    except FileNotFoundError:
        console.print(f"Input not found: {args.path}", markup=False)
        return 2
    except ValueError as exc:
        console.print(f"Invalid input: {exc}", markup=False)
        return 2

    try:
        estimate = estimator.query(args.policy)
    except InsufficientDataError as exc:
        console.print(f"Estimate unavailable: {exc}", markup=False)
        return 1

    summary = Table.grid(padding=(0, 3))
    summary.add_column("Field", style="bold cyan")
    summary.add_column("Value")
    summary.add_row("samples:", f"{estimator.count:,}")
    summary.add_row("p:", str(estimator.p))
    summary.add_row("policy:", args.policy)
    summary.add_row("estimate:", f"{estimate:.6f}")
    console.print(summary)

    if args.show_markers:
        _render_markers(console, estimator.markers())
    if recorder is not None:
        _render_trace(console, recorder.adjustments)
    return 0


def _run_trials(args: argparse.Namespace, *, console: Console) -> int:
    try:
        config = TrialsConfig(
            p=args.p,
            dataset_size=args.dataset,
            iterations=args.iterations,
            report_every=args.report_every,
            distribution=args.distribution,
            workers=args.workers,
            policy=args.policy,
        )
    except ValidationError as exc:
        console.print(f"Invalid configuration: {exc}", markup=False)
        return 2

    report = QuantileHarness().run_trials(config)
    RichReporter(console).render_trials(report)
    return 0


def _run_converge(args: argparse.Namespace, *, console: Console) -> int:
    try:
        config = ConvergenceConfig(
            p=args.p,
            checkpoints=args.checkpoints,
            seed=args.seed,
            distribution=args.distribution,
            policy=args.policy,
        )
    except ValidationError as exc:
        console.print(f"Invalid configuration: {exc}", markup=False)
        return 2

    report = QuantileHarness().run_convergence(config)
    RichReporter(console).render_convergence(report)
    return 0


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    console: Console | None = None,
    stdin: TextIO | None = None,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    out_console = console or Console()

    if args.command == "estimate":
        return _run_estimate(args, console=out_console, stdin=stdin or sys.stdin)
    if args.command == "trials":
        return _run_trials(args, console=out_console)
    if args.command == "converge":
        return _run_converge(args, console=out_console)
    parser.error("Unknown command.")
    return 2


def main() -> None:
    raise SystemExit(run_cli())
