from __future__ import annotations

import logging
from collections.abc import Iterator

import numpy as np
from numpy.typing import NDArray

from p2lens.contracts import SampleSource

logger = logging.getLogger(__name__)


class ShuffledRangeSource(SampleSource):
    """The integers ``1..size`` as floats, in a seeded random order."""

    def __init__(self, size: int, seed: int) -> None:
        if size <= 0:
            logger.error("Rejected non-positive sequence size %d.", size)
            raise ValueError("size must be positive.")
        self._size = size
        self._seed = seed

    def values(self) -> NDArray[np.float64]:
        rng = np.random.default_rng(self._seed)
        ordered = np.arange(1, self._size + 1, dtype=np.float64)
        return rng.permutation(ordered)

    def iter_samples(self) -> Iterator[float]:
        for value in self.values():
            yield float(value)
