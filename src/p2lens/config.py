from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from p2lens.p2_quantile import QueryPolicy, validate_quantile
from p2lens.sources import Distribution

DEFAULT_CHECKPOINTS: tuple[int, ...] = (100, 500, 1000, 2500, 5000, 10000)


class TrialsConfig(BaseModel):
    """Settings for repeated independent trials."""

    model_config = ConfigDict(extra="forbid")

    p: float = 0.75
    dataset_size: int = Field(default=10_000, ge=5)
    iterations: int = Field(default=200, ge=1)
    report_every: int = Field(default=10, ge=1)
    distribution: Distribution = "shuffled"
    workers: int | None = Field(default=None, ge=1)
    policy: QueryPolicy = "markers"

    @field_validator("p")
    @classmethod
    def _check_p(cls, value: float) -> float:
        return validate_quantile(value)


class ConvergenceConfig(BaseModel):
    """Settings for a single estimator fed up to increasing checkpoints."""

    model_config = ConfigDict(extra="forbid")

    p: float = 0.75
    checkpoints: tuple[int, ...] = DEFAULT_CHECKPOINTS
    seed: int = 1
    distribution: Distribution = "shuffled"
    policy: QueryPolicy = "markers"

    @field_validator("p")
    @classmethod
    def _check_p(cls, value: float) -> float:
        return validate_quantile(value)

    @field_validator("checkpoints")
    @classmethod
    def _check_checkpoints(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if not value:
            raise ValueError("at least one checkpoint is required")
        if value[0] < 5:
            raise ValueError("checkpoints must be at least 5")
        if any(later <= earlier for earlier, later in zip(value, value[1:])):
            raise ValueError("checkpoints must be strictly increasing")
        return value
