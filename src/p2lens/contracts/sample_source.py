from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator

import numpy as np
from numpy.typing import NDArray


class SampleSource(ABC):
    """Produce numeric samples one at a time."""

    @abstractmethod
    def iter_samples(self) -> Iterator[float]:
        """Yield samples in stream order."""
        raise NotImplementedError

    def values(self) -> NDArray[np.float64]:
        """Materialise the whole stream.

        Only harness code that needs an exact reference should call this;
        the estimator itself consumes :meth:`iter_samples`.
        """
        return np.fromiter(self.iter_samples(), dtype=np.float64)
