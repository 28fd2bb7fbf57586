"""
Audio source adapter: decoding, frequency frames and sample buffers.
"""

from .loader import AudioLoader, DecodedAudio
from .analyzer import FrequencyAnalyzer
from .source import AudioSource

__all__ = [
    "AudioLoader",
    "DecodedAudio",
    "FrequencyAnalyzer",
    "AudioSource",
]
