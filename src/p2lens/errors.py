from __future__ import annotations


class P2LensError(ValueError):
    """Base class for estimator validation failures."""


class InvalidQuantileError(P2LensError):
    """Raised when the target quantile is not a finite value in [0, 1]."""


class InsufficientDataError(P2LensError):
    """Raised when the estimate is requested before the markers exist."""

    def __init__(self, count: int, required: int = 5) -> None:
        super().__init__(
            f"At least {required} samples are required, got {count}."
        )
        self.count = count
        self.required = required


class NonFiniteSampleError(P2LensError):
    """Raised when a NaN or infinite sample is ingested."""
