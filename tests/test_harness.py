from __future__ import annotations

from unittest.mock import patch

import numpy as np
import pytest

from p2lens.config import ConvergenceConfig, TrialsConfig
from p2lens.harness import QuantileHarness
from p2lens.observers import RecordingMarkerObserver
from p2lens.sources import ShuffledRangeSource
from p2lens.sources.registry import Distribution


def test_convergence_reports_every_checkpoint() -> None:
    config = ConvergenceConfig(p=0.75, checkpoints=(100, 1000), seed=1)

    report = QuantileHarness().run_convergence(config)

    assert [point.count for point in report.points] == [100, 1000]
    values = ShuffledRangeSource(1000, seed=1).values()
    for point in report.points:
        expected = float(np.quantile(values[: point.count], 0.75))
        assert point.exact == pytest.approx(expected)
        assert point.abs_error == pytest.approx(abs(point.exact - point.estimate))
        assert point.markers.min <= point.markers.median <= point.markers.max
    assert report.points[-1].rel_error < 0.05


def test_convergence_forwards_observer() -> None:
    observer = RecordingMarkerObserver()
    config = ConvergenceConfig(p=0.5, checkpoints=(50,), seed=3)

    QuantileHarness().run_convergence(config, observer=observer)

    assert observer.warmup is not None
    assert observer.adjustments


def test_trials_compute_running_means_and_exact() -> None:
    config = TrialsConfig(p=0.5, dataset_size=500, iterations=4, workers=1)

    report = QuantileHarness().run_trials(config)

    estimates = [trial.estimate for trial in report.trials]
    assert [trial.iteration for trial in report.trials] == [1, 2, 3, 4]
    for index, trial in enumerate(report.trials, start=1):
        assert trial.running_mean == pytest.approx(np.mean(estimates[:index]))
    # Every trial is a permutation of 1..500, so the pooled median is exact.
    assert report.exact == pytest.approx(250.5)
    assert report.mean_estimate == pytest.approx(np.mean(estimates))
    assert report.difference == pytest.approx(abs(report.exact - report.mean_estimate))


def test_parallel_trials_match_sequential_trials() -> None:
    sequential = QuantileHarness().run_trials(
        TrialsConfig(p=0.9, dataset_size=300, iterations=6, workers=1)
    )
    parallel = QuantileHarness().run_trials(
        TrialsConfig(p=0.9, dataset_size=300, iterations=6, workers=3)
    )

    assert sequential.trials == parallel.trials
    assert sequential.exact == parallel.exact


def test_trials_seed_each_source_with_its_iteration() -> None:
    seen: list[tuple[Distribution, int, int]] = []

    def factory(distribution: Distribution, size: int, seed: int) -> ShuffledRangeSource:
        seen.append((distribution, size, seed))
        return ShuffledRangeSource(size, seed)

    config = TrialsConfig(dataset_size=50, iterations=3, workers=1)
    QuantileHarness(source_factory=factory).run_trials(config)

    assert seen == [("shuffled", 50, 1), ("shuffled", 50, 2), ("shuffled", 50, 3)]


def test_auto_workers_use_memory_budget() -> None:
    config = TrialsConfig(dataset_size=100, iterations=5)

    with patch("p2lens.harness.compute_max_workers", return_value=1) as mocked:
        report = QuantileHarness().run_trials(config)

    mocked.assert_called_once_with(100)
    assert len(report.trials) == 5


def test_trials_accept_other_distributions() -> None:
    config = TrialsConfig(
        p=0.25, dataset_size=5000, iterations=3, distribution="uniform", workers=1
    )

    report = QuantileHarness().run_trials(config)

    assert report.distribution == "uniform"
    assert report.difference < 0.02
