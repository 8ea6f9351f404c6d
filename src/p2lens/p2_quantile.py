"""Streaming single-quantile estimation with the P² algorithm.

Jain & Chlamtac, "The P² algorithm for dynamic calculation of quantiles and
histograms without storing observations", CACM 28(10), 1985.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from typing import Literal

import numpy as np

from p2lens.contracts import MarkerObserver
from p2lens.errors import (
    InsufficientDataError,
    InvalidQuantileError,
    NonFiniteSampleError,
)
from p2lens.models import EstimatorState, MarkerAdjustment, MarkerSnapshot

logger = logging.getLogger(__name__)

QueryPolicy = Literal["markers", "quartile_grid", "desired_position"]
CorrectionMethod = Literal["parabolic", "linear"]

QUERY_POLICIES: tuple[QueryPolicy, ...] = (
    "markers",
    "quartile_grid",
    "desired_position",
)

_MARKER_COUNT = 5
_INITIAL_POSITIONS = (1.0, 2.0, 3.0, 4.0, 5.0)


def validate_quantile(p: float) -> float:
    """Return *p* as a float, raising InvalidQuantileError unless 0 <= p <= 1."""
    if isinstance(p, (bool, str)):
        logger.error("Rejected non-numeric target quantile %r.", p)
        raise InvalidQuantileError(f"p must be a number, got {p!r}.")
    try:
        value = float(p)
    except (TypeError, ValueError):
        logger.error("Rejected non-numeric target quantile %r.", p)
        raise InvalidQuantileError(f"p must be a number, got {p!r}.") from None
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        logger.error("Rejected target quantile %r outside [0, 1].", p)
        raise InvalidQuantileError(f"p must be in [0, 1], got {p!r}.")
    return value


class P2QuantileEstimator:
    """P² estimator of the p-th quantile with constant memory.

    Five markers track the running minimum, the ``p/2``, ``p`` and
    ``(1+p)/2`` quantiles and the running maximum. Every sample past the
    first five bumps the marker ranks, advances the desired ranks and moves
    each interior marker that has drifted by at least one rank, using a
    parabolic prediction when it stays strictly between its neighbours and
    a linear one otherwise.

    Not thread-safe: callers sharing an instance must serialize ``ingest``.
    """

    def __init__(self, p: float, observer: MarkerObserver | None = None) -> None:
        self._p = validate_quantile(p)
        self._observer = observer
        self._count = 0
        self._heights: list[float] = []
        self._positions: list[float] = list(_INITIAL_POSITIONS)
        self._desired: list[float] = list(_INITIAL_POSITIONS)
        self._increments: tuple[float, ...] = (
            0.0,
            self._p / 2.0,
            self._p,
            (1.0 + self._p) / 2.0,
            1.0,
        )

    @property
    def p(self) -> float:
        return self._p

    @property
    def count(self) -> int:
        return self._count

    @property
    def is_warm(self) -> bool:
        """True once the five markers have been initialised."""
        return self._count >= _MARKER_COUNT

    def ingest(self, sample: float) -> None:
        """Observe one sample."""
        try:
            value = float(sample)
        except OverflowError:
            logger.error("Rejected sample too large for a float.")
            raise NonFiniteSampleError(
                f"Sample must be finite, got {sample!r}."
            ) from None
        if not math.isfinite(value):
            logger.error("Rejected non-finite sample %r.", sample)
            raise NonFiniteSampleError(f"Sample must be finite, got {sample!r}.")

        self._count += 1
        if self._count <= _MARKER_COUNT:
            self._heights.append(value)
            if self._count == _MARKER_COUNT:
                self._initialize_markers()
            return

        self._bump_positions(value)
        self._advance_desired()
        self._adjust_markers()

    def ingest_many(self, samples: Iterable[float]) -> int:
        """Observe every sample of *samples* in order; return how many."""
        if isinstance(samples, np.ndarray):
            samples = samples.flat
        ingested = 0
        for sample in samples:
            self.ingest(sample)
            ingested += 1
        return ingested

    def query(self, policy: QueryPolicy = "markers") -> float:
        """Return the current estimate of the p-th quantile.

        ``"markers"`` interpolates linearly between the markers at their
        actual ranks, evaluated at the target rank ``1 + p * (count - 1)``.
        ``"quartile_grid"`` treats the markers as the 0/25/50/75/100th
        percentiles regardless of ``p``. ``"desired_position"`` returns the
        desired rank of the middle marker and is meant for debugging only.
        """
        self._require_markers()
        if policy == "markers":
            return self._interpolate_ranks()
        if policy == "quartile_grid":
            return self._interpolate_quartile_grid()
        if policy == "desired_position":
            return self._desired[2]
        logger.error("Unknown query policy %r.", policy)
        raise ValueError(f"Unknown query policy {policy!r}.")

    def markers(self) -> MarkerSnapshot:
        self._require_markers()
        h = self._heights
        return MarkerSnapshot(min=h[0], q1=h[1], median=h[2], q3=h[3], max=h[4])

    def state(self) -> EstimatorState:
        return EstimatorState(
            p=self._p,
            count=self._count,
            markers=tuple(self._heights),
            positions=tuple(self._positions),
            desired_positions=tuple(self._desired),
            increments=self._increments,
        )

    @classmethod
    def from_state(
        cls, state: EstimatorState, observer: MarkerObserver | None = None
    ) -> P2QuantileEstimator:
        """Rebuild an estimator that continues from a :meth:`state` snapshot.

        The warm-up hook does not fire again for a restored estimator.
        """
        buffered = min(state.count, _MARKER_COUNT)
        if (
            len(state.markers) != buffered
            or len(state.positions) != _MARKER_COUNT
            or len(state.desired_positions) != _MARKER_COUNT
        ):
            logger.error(
                "Rejected estimator state with %d markers after %d samples.",
                len(state.markers),
                state.count,
            )
            raise ValueError(
                f"State must hold {buffered} markers and five positions."
            )
        estimator = cls(state.p, observer=observer)
        estimator._count = state.count
        estimator._heights = list(state.markers)
        estimator._positions = list(state.positions)
        estimator._desired = list(state.desired_positions)
        return estimator

    def _require_markers(self) -> None:
        if self._count < _MARKER_COUNT:
            logger.error(
                "Estimate requested after %d samples; %d required.",
                self._count,
                _MARKER_COUNT,
            )
            raise InsufficientDataError(self._count, _MARKER_COUNT)

    def _initialize_markers(self) -> None:
        self._heights.sort()
        self._positions = list(_INITIAL_POSITIONS)
        self._desired = list(_INITIAL_POSITIONS)
        logger.debug("Initialised markers for p=%.6f: %s.", self._p, self._heights)
        if self._observer is not None:
            self._observer.on_warmup_complete(self.state())

    def _bump_positions(self, value: float) -> None:
        heights = self._heights
        if value < heights[0]:
            heights[0] = value
            first = 1
        elif value >= heights[4]:
            heights[4] = value
            first = 4
        else:
            first = 1
            while value >= heights[first]:
                first += 1
        for index in range(first, _MARKER_COUNT):
            self._positions[index] += 1.0

    def _advance_desired(self) -> None:
        for index in range(_MARKER_COUNT):
            self._desired[index] += self._increments[index]

        positions = self._positions
        for index in range(1, _MARKER_COUNT):
            floor = positions[index - 1] + 1.0
            if positions[index] < floor:
                logger.debug(
                    "Clamped position of marker %d from %.1f to %.1f.",
                    index,
                    positions[index],
                    floor,
                )
                positions[index] = floor

    def _adjust_markers(self) -> None:
        # Every interior marker sees the pre-round heights and positions.
        heights = tuple(self._heights)
        positions = tuple(self._positions)
        moves: dict[int, tuple[int, CorrectionMethod, float]] = {}
        for index in range(1, 4):
            step = self._step(index, positions)
            if step == 0:
                continue
            proposal = self._parabolic(index, step, heights, positions)
            if heights[index - 1] < proposal < heights[index + 1]:
                moves[index] = (step, "parabolic", proposal)
            else:
                linear = self._linear(index, step, heights, positions)
                moves[index] = (step, "linear", linear)

        # Neighbours stepping toward each other share one free rank when
        # they are two apart; only the lower one takes it. Wider apart they
        # may still cross on parabolic values, and the linear pair cannot.
        for index in (1, 2):
            lower = moves.get(index)
            upper = moves.get(index + 1)
            if lower is None or upper is None:
                continue
            if lower[0] != 1 or upper[0] != -1:
                continue
            if positions[index + 1] - positions[index] < 3.0:
                del moves[index + 1]
            elif lower[2] > upper[2]:
                moves[index] = (
                    1,
                    "linear",
                    self._linear(index, 1, heights, positions),
                )
                moves[index + 1] = (
                    -1,
                    "linear",
                    self._linear(index + 1, -1, heights, positions),
                )

        for index, (step, method, new_value) in sorted(moves.items()):
            self._heights[index] = new_value
            self._positions[index] = positions[index] + step

            if self._observer is not None:
                self._observer.on_adjustment(
                    MarkerAdjustment(
                        count=self._count,
                        index=index,
                        step=step,
                        method=method,
                        old_value=heights[index],
                        new_value=new_value,
                        old_position=positions[index],
                        new_position=self._positions[index],
                    )
                )

    def _step(self, index: int, positions: Sequence[float]) -> int:
        delta = self._desired[index] - positions[index]
        if delta >= 1.0 and positions[index + 1] - positions[index] > 1.0:
            return 1
        if delta <= -1.0 and positions[index - 1] - positions[index] < -1.0:
            return -1
        return 0

    def _interpolate_ranks(self) -> float:
        target = 1.0 + self._p * (self._count - 1)
        heights = self._heights
        positions = self._positions
        if target <= positions[0]:
            return heights[0]
        for index in range(1, _MARKER_COUNT):
            if target == positions[index]:
                return heights[index]
            if target < positions[index]:
                lower = index - 1
                frac = (target - positions[lower]) / (
                    positions[index] - positions[lower]
                )
                return _lerp(heights[lower], heights[index], frac)
        return heights[4]

    def _interpolate_quartile_grid(self) -> float:
        p = self._p
        h = self._heights
        if p <= 0.0:
            return h[0]
        if p >= 1.0:
            return h[4]
        if p <= 0.25:
            return _lerp(h[0], h[1], p / 0.25)
        if p <= 0.5:
            return _lerp(h[1], h[2], (p - 0.25) / 0.25)
        if p <= 0.75:
            return _lerp(h[2], h[3], (p - 0.5) / 0.25)
        return _lerp(h[3], h[4], (p - 0.75) / 0.25)

    @staticmethod
    def _parabolic(
        index: int,
        step: int,
        heights: Sequence[float],
        positions: Sequence[float],
    ) -> float:
        return heights[index] + step / (positions[index + 1] - positions[index - 1]) * (
            (positions[index] - positions[index - 1] + step)
            * (heights[index + 1] - heights[index])
            / (positions[index + 1] - positions[index])
            + (positions[index + 1] - positions[index] - step)
            * (heights[index] - heights[index - 1])
            / (positions[index] - positions[index - 1])
        )

    @staticmethod
    def _linear(
        index: int,
        step: int,
        heights: Sequence[float],
        positions: Sequence[float],
    ) -> float:
        return heights[index] + step * (
            (heights[index + step] - heights[index])
            / (positions[index + step] - positions[index])
        )


def _lerp(low: float, high: float, frac: float) -> float:
    return low + (high - low) * frac
