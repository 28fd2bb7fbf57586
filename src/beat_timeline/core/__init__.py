"""
Core analysis components: beat detection, waveform envelope, playback timeline.
"""

from .beat_detector import BeatDetector, BeatEvent, DetectorState
from .waveform import WaveformReducer, Envelope, EnvelopeColumn, reduce, column_bounds
from .timeline import PlaybackTimeline, TimelinePosition, TimelineState, format_time
from .session import AnalysisSession
from .player import OfflinePlayer

__all__ = [
    "BeatDetector",
    "BeatEvent",
    "DetectorState",
    "WaveformReducer",
    "Envelope",
    "EnvelopeColumn",
    "reduce",
    "column_bounds",
    "PlaybackTimeline",
    "TimelinePosition",
    "TimelineState",
    "format_time",
    "AnalysisSession",
    "OfflinePlayer",
]
