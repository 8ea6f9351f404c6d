from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from p2lens.models import ConvergenceReport, TrialsReport


class Reporter(ABC):
    """Render harness results for presentation."""

    @abstractmethod
    def render_trials(self, report: TrialsReport) -> None:
        """Render the outcome of repeated trials."""
        raise NotImplementedError

    @abstractmethod
    def render_convergence(self, report: ConvergenceReport) -> None:
        """Render the convergence checkpoints."""
        raise NotImplementedError
