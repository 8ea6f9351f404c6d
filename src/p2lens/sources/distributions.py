from __future__ import annotations

import logging
from collections.abc import Iterator

import numpy as np
from numpy.typing import NDArray

from p2lens.contracts import SampleSource

logger = logging.getLogger(__name__)


def _check_size(size: int) -> None:
    if size <= 0:
        logger.error("Rejected non-positive sample count %d.", size)
        raise ValueError("size must be positive.")


class UniformSource(SampleSource):
    """Seeded i.i.d. samples from U(low, high)."""

    def __init__(
        self, size: int, seed: int, low: float = 0.0, high: float = 1.0
    ) -> None:
        _check_size(size)
        if high <= low:
            logger.error("Rejected empty range [%s, %s).", low, high)
            raise ValueError("high must be greater than low.")
        self._size = size
        self._seed = seed
        self._low = low
        self._high = high

    def values(self) -> NDArray[np.float64]:
        rng = np.random.default_rng(self._seed)
        return rng.uniform(self._low, self._high, size=self._size)

    def iter_samples(self) -> Iterator[float]:
        for value in self.values():
            yield float(value)


class NormalSource(SampleSource):
    """Seeded i.i.d. samples from N(mean, std**2)."""

    def __init__(
        self, size: int, seed: int, mean: float = 0.0, std: float = 1.0
    ) -> None:
        _check_size(size)
        if std <= 0.0:
            logger.error("Rejected non-positive standard deviation %s.", std)
            raise ValueError("std must be positive.")
        self._size = size
        self._seed = seed
        self._mean = mean
        self._std = std

    def values(self) -> NDArray[np.float64]:
        rng = np.random.default_rng(self._seed)
        return rng.normal(self._mean, self._std, size=self._size)

    def iter_samples(self) -> Iterator[float]:
        for value in self.values():
            yield float(value)
