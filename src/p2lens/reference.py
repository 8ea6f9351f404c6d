from __future__ import annotations

import logging
import math

import numpy as np
from numpy.typing import ArrayLike

logger = logging.getLogger(__name__)


def exact_quantile(values: ArrayLike, p: float) -> float:
    """Return the p-th quantile of *values* by sorting and interpolating.

    Interpolates linearly at rank ``(n - 1) * p``, which matches numpy's
    ``method="linear"``.
    """
    data = np.asarray(values, dtype=np.float64)
    if data.size == 0:
        logger.error("Exact quantile requested for an empty sequence.")
        raise ValueError("No samples provided for exact quantile.")
    if not 0.0 <= p <= 1.0:
        raise ValueError("p must be in [0, 1].")
    return float(np.quantile(data, p, method="linear"))


def relative_error(estimate: float, exact: float) -> float:
    """Return ``|estimate - exact| / |exact|``."""
    difference = abs(estimate - exact)
    if exact == 0.0:
        return 0.0 if difference == 0.0 else math.inf
    return difference / abs(exact)
