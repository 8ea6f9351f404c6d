from __future__ import annotations

from typing import Literal

from p2lens.contracts import SampleSource
from p2lens.sources.distributions import NormalSource, UniformSource
from p2lens.sources.shuffled import ShuffledRangeSource

Distribution = Literal["shuffled", "uniform", "normal"]

DISTRIBUTIONS: tuple[Distribution, ...] = ("shuffled", "uniform", "normal")


def make_source(distribution: Distribution, size: int, seed: int) -> SampleSource:
    """Build a seeded synthetic source by name."""
    if distribution == "shuffled":
        return ShuffledRangeSource(size, seed)
    if distribution == "uniform":
        return UniformSource(size, seed)
    if distribution == "normal":
        return NormalSource(size, seed)
    raise ValueError(f"Unknown distribution {distribution!r}.")
