from __future__ import annotations

import logging

from p2lens.contracts import MarkerObserver
from p2lens.models import EstimatorState, MarkerAdjustment

logger = logging.getLogger(__name__)


class LoggingMarkerObserver(MarkerObserver):
    """Write estimator events to a logger, one line per event."""

    def __init__(
        self, target: logging.Logger | None = None, level: int = logging.DEBUG
    ) -> None:
        self._logger = target or logger
        self._level = level

    def on_warmup_complete(self, state: EstimatorState) -> None:
        self._logger.log(
            self._level,
            "Warm-up complete for p=%.6f: markers=%s positions=%s desired=%s.",
            state.p,
            list(state.markers),
            list(state.positions),
            list(state.desired_positions),
        )

    def on_adjustment(self, event: MarkerAdjustment) -> None:
        self._logger.log(
            self._level,
            "Sample %d: marker %d moved %+d via %s, value %.6f -> %.6f, "
            "position %.1f -> %.1f.",
            event.count,
            event.index,
            event.step,
            event.method,
            event.old_value,
            event.new_value,
            event.old_position,
            event.new_position,
        )
