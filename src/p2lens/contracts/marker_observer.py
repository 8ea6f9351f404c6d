from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from p2lens.models import EstimatorState, MarkerAdjustment


class MarkerObserver(ABC):
    """Receive estimator events at well-defined points of ingestion."""

    @abstractmethod
    def on_warmup_complete(self, state: EstimatorState) -> None:
        """Called once, after the fifth sample has been sorted into the markers."""
        raise NotImplementedError

    @abstractmethod
    def on_adjustment(self, event: MarkerAdjustment) -> None:
        """Called for every interior marker that moves by one rank."""
        raise NotImplementedError
