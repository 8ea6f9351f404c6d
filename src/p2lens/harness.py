from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

import numpy as np
from numpy.typing import NDArray

from p2lens.config import ConvergenceConfig, TrialsConfig
from p2lens.contracts import MarkerObserver, SampleSource
from p2lens.models import (
    ConvergencePoint,
    ConvergenceReport,
    TrialResult,
    TrialsReport,
)
from p2lens.p2_quantile import P2QuantileEstimator
from p2lens.reference import exact_quantile, relative_error
from p2lens.sources import Distribution, make_source
from p2lens.workers import compute_max_workers

logger = logging.getLogger(__name__)

SourceFactory = Callable[[Distribution, int, int], SampleSource]

_TrialOutcome = tuple[float, NDArray[np.float64]]


class QuantileHarness:
    """Feed estimators from seeded sources and compare with exact quantiles.

    Every trial owns its estimator, so trials can run on a thread pool
    without sharing mutable estimator state.
    """

    def __init__(self, source_factory: SourceFactory = make_source) -> None:
        self._source_factory = source_factory

    def run_trials(self, config: TrialsConfig) -> TrialsReport:
        num_workers = self._resolve_workers(config)
        if num_workers > 1:
            outcomes = self._run_trials_parallel(config, num_workers)
        else:
            outcomes = [
                self._run_trial(config, iteration)
                for iteration in range(1, config.iterations + 1)
            ]

        trials: list[TrialResult] = []
        cumulative = 0.0
        for iteration, (estimate, _) in enumerate(outcomes, start=1):
            cumulative += estimate
            trials.append(
                TrialResult(
                    iteration=iteration,
                    estimate=estimate,
                    running_mean=cumulative / iteration,
                )
            )

        exact = exact_quantile(
            np.concatenate([values for _, values in outcomes]), config.p
        )
        mean_estimate = cumulative / config.iterations
        report = TrialsReport(
            p=config.p,
            dataset_size=config.dataset_size,
            iterations=config.iterations,
            report_every=config.report_every,
            distribution=config.distribution,
            policy=config.policy,
            trials=trials,
            exact=exact,
            mean_estimate=mean_estimate,
            difference=abs(exact - mean_estimate),
        )
        logger.debug(
            "Finished %d trials: exact=%.6f mean_estimate=%.6f difference=%.6f.",
            config.iterations,
            report.exact,
            report.mean_estimate,
            report.difference,
        )
        return report

    def run_convergence(
        self,
        config: ConvergenceConfig,
        observer: MarkerObserver | None = None,
    ) -> ConvergenceReport:
        size = config.checkpoints[-1]
        values = self._source_factory(config.distribution, size, config.seed).values()
        estimator = P2QuantileEstimator(config.p, observer=observer)

        points: list[ConvergencePoint] = []
        processed = 0
        for checkpoint in config.checkpoints:
            estimator.ingest_many(values[processed:checkpoint])
            processed = checkpoint

            estimate = estimator.query(config.policy)
            exact = exact_quantile(values[:checkpoint], config.p)
            point = ConvergencePoint(
                count=checkpoint,
                markers=estimator.markers(),
                estimate=estimate,
                exact=exact,
                abs_error=abs(exact - estimate),
                rel_error=relative_error(estimate, exact),
            )
            logger.debug(
                "Checkpoint %d: estimate=%.6f exact=%.6f rel_error=%.6f.",
                checkpoint,
                estimate,
                exact,
                point.rel_error,
            )
            points.append(point)

        return ConvergenceReport(
            p=config.p,
            seed=config.seed,
            distribution=config.distribution,
            policy=config.policy,
            points=points,
        )

    def _resolve_workers(self, config: TrialsConfig) -> int:
        if config.workers is not None:
            return min(config.workers, config.iterations)
        return min(compute_max_workers(config.dataset_size), config.iterations)

    def _run_trial(self, config: TrialsConfig, iteration: int) -> _TrialOutcome:
        source = self._source_factory(
            config.distribution, config.dataset_size, iteration
        )
        values = source.values()
        estimator = P2QuantileEstimator(config.p)
        estimator.ingest_many(values)
        estimate = estimator.query(config.policy)
        logger.debug("Trial %d estimate=%.6f.", iteration, estimate)
        return estimate, values

    def _run_trials_parallel(
        self, config: TrialsConfig, num_workers: int
    ) -> list[_TrialOutcome]:
        outcomes: list[_TrialOutcome] = []
        # Bounded window of futures, drained in submission order
        pending: deque[Future[_TrialOutcome]] = deque()

        with ThreadPoolExecutor(max_workers=num_workers) as pool:
            for iteration in range(1, config.iterations + 1):
                pending.append(pool.submit(self._run_trial, config, iteration))
                while len(pending) > num_workers and pending[0].done():
                    outcomes.append(pending.popleft().result())
            while pending:
                outcomes.append(pending.popleft().result())

        return outcomes
