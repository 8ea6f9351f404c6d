from __future__ import annotations

from collections import Counter

from p2lens.contracts import MarkerObserver
from p2lens.models import EstimatorState, MarkerAdjustment


class RecordingMarkerObserver(MarkerObserver):
    """Keep every estimator event in memory for inspection."""

    def __init__(self) -> None:
        self.warmup: EstimatorState | None = None
        self.adjustments: list[MarkerAdjustment] = []

    def on_warmup_complete(self, state: EstimatorState) -> None:
        self.warmup = state

    def on_adjustment(self, event: MarkerAdjustment) -> None:
        self.adjustments.append(event)

    def method_counts(self) -> dict[str, int]:
        """Return how many adjustments used each correction method."""
        counts = Counter(event.method for event in self.adjustments)
        return {"parabolic": counts["parabolic"], "linear": counts["linear"]}
