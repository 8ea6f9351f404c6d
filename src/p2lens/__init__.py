from .errors import (
    InsufficientDataError,
    InvalidQuantileError,
    NonFiniteSampleError,
    P2LensError,
)
from .models import EstimatorState, MarkerAdjustment, MarkerSnapshot
from .p2_quantile import P2QuantileEstimator, QueryPolicy

__all__ = [
    "EstimatorState",
    "InsufficientDataError",
    "InvalidQuantileError",
    "MarkerAdjustment",
    "MarkerSnapshot",
    "NonFiniteSampleError",
    "P2LensError",
    "P2QuantileEstimator",
    "QueryPolicy",
]
