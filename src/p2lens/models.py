from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


class MarkerSnapshot(BaseModel):
    """Current marker heights, lowest to highest."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    min: float
    q1: float
    median: float
    q3: float
    max: float

    def as_tuple(self) -> tuple[float, float, float, float, float]:
        return (self.min, self.q1, self.median, self.q3, self.max)


class EstimatorState(BaseModel):
    """Read-only copy of the full estimator state."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    p: float
    count: int
    markers: tuple[float, ...]
    positions: tuple[float, ...]
    desired_positions: tuple[float, ...]
    increments: tuple[float, ...]


class MarkerAdjustment(BaseModel):
    """One interior marker correction applied during ingestion."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    count: int
    index: int
    step: int
    method: Literal["parabolic", "linear"]
    old_value: float
    new_value: float
    old_position: float
    new_position: float


class TrialResult(BaseModel):
    """Estimate produced by one independent trial."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    iteration: int
    estimate: float
    running_mean: float


class TrialsReport(BaseModel):
    """Outcome of repeated independent trials."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    p: float
    dataset_size: int
    iterations: int
    report_every: int
    distribution: str
    policy: str
    trials: list[TrialResult]
    exact: float
    mean_estimate: float
    difference: float


class ConvergencePoint(BaseModel):
    """Estimator accuracy after a given number of samples."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    count: int
    markers: MarkerSnapshot
    estimate: float
    exact: float
    abs_error: float
    rel_error: float


class ConvergenceReport(BaseModel):
    """Accuracy of a single estimator across increasing sample counts."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    p: float
    seed: int
    distribution: str
    policy: str
    points: list[ConvergencePoint]
