"""
Decoded audio sources feeding the analysis pipelines.
"""

import itertools
from typing import Any, Dict, Optional

import numpy as np

from ..config.settings import Settings, get_settings
from ..utils.exceptions import ValidationError
from ..utils.logging import get_logger
from .analyzer import FrequencyAnalyzer
from .loader import AudioLoader, DecodedAudio

logger = get_logger(__name__)

_source_ids = itertools.count(1)


class AudioSource:
    """
    One loaded track: the sample buffer for envelope extraction and a
    frequency analyzer for frames during playback.

    Every instance gets a fresh ``source_id`` so that frames computed for a
    replaced source can be recognised and dropped.
    """

    def __init__(self,
                 samples: np.ndarray,
                 sample_rate: int,
                 settings: Optional[Settings] = None,
                 metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize audio source.

        Args:
            samples: Mono samples in [-1.0, 1.0]
            sample_rate: Sample rate in Hz
            settings: Application settings
            metadata: Optional file metadata
        """
        if sample_rate <= 0:
            raise ValidationError(f"Sample rate must be positive, got {sample_rate}")

        self.settings = settings or get_settings()
        self.source_id = next(_source_ids)
        self.sample_rate = int(sample_rate)
        self.metadata = dict(metadata or {})

        buffer = np.clip(np.asarray(samples, dtype=np.float32).reshape(-1), -1.0, 1.0)
        buffer.setflags(write=False)
        self.samples = buffer

        self.analyzer = FrequencyAnalyzer.from_settings(self.settings)

    @classmethod
    def from_file(cls, file_path: str, settings: Optional[Settings] = None,
                  loader: Optional[AudioLoader] = None) -> 'AudioSource':
        """
        Decode a file and keep its first channel.

        Raises:
            AudioLoadError: If decoding fails
            ValidationError: If the path or format is not accepted
        """
        settings = settings or get_settings()
        loader = loader or AudioLoader(settings)
        decoded = loader.load_audio(file_path)
        return cls.from_decoded(decoded, settings)

    @classmethod
    def from_decoded(cls, decoded: DecodedAudio, settings: Optional[Settings] = None) -> 'AudioSource':
        return cls(decoded.channel(0), decoded.sample_rate, settings=settings, metadata=decoded.metadata)

    @classmethod
    def from_array(cls, samples: np.ndarray, sample_rate: int,
                   settings: Optional[Settings] = None) -> 'AudioSource':
        return cls(samples, sample_rate, settings=settings)

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate

    def frame_at(self, position_seconds: float) -> np.ndarray:
        """Frequency frame for the playback position."""
        return self.analyzer.frame_at(self.samples, self.sample_rate, position_seconds)

    def reset_analysis(self):
        self.analyzer.reset()

    def __repr__(self) -> str:
        name = self.metadata.get('file_name', '<array>')
        return (f"AudioSource(id={self.source_id}, name={name!r}, "
                f"duration={self.duration:.2f}s, sample_rate={self.sample_rate})")
