from .logging_observer import LoggingMarkerObserver
from .recording_observer import RecordingMarkerObserver

__all__ = ["LoggingMarkerObserver", "RecordingMarkerObserver"]
