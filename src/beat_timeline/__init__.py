"""
beat-timeline - streaming beat detection and waveform envelopes

Analyses an audio track while it plays: bass-energy beat detection on
successive frequency frames, a fixed-width min/max envelope of the decoded
samples, and a playback timeline tying both to the playhead.
"""

__version__ = "1.0.0"
__author__ = "beat-timeline Team"

from .config.settings import Settings
from .audio.source import AudioSource
from .core.beat_detector import BeatDetector, BeatEvent
from .core.waveform import WaveformReducer, Envelope
from .core.timeline import PlaybackTimeline, TimelineState
from .core.session import AnalysisSession

__all__ = [
    "Settings",
    "AudioSource",
    "BeatDetector",
    "BeatEvent",
    "WaveformReducer",
    "Envelope",
    "PlaybackTimeline",
    "TimelineState",
    "AnalysisSession",
]
