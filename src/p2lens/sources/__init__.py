from .distributions import NormalSource, UniformSource
from .registry import DISTRIBUTIONS, Distribution, make_source
from .shuffled import ShuffledRangeSource
from .text import TextSampleSource

__all__ = [
    "DISTRIBUTIONS",
    "Distribution",
    "NormalSource",
    "ShuffledRangeSource",
    "TextSampleSource",
    "UniformSource",
    "make_source",
]
