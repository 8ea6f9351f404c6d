from .marker_observer import MarkerObserver
from .reporter import Reporter
from .sample_source import SampleSource

__all__ = [
    "MarkerObserver",
    "Reporter",
    "SampleSource",
]
