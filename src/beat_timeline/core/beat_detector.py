"""
Real-time beat detection on frequency frames.

A beat is reported when the mean magnitude of the lowest spectrum bins rises
above a fixed threshold, and at least a refractory period has passed since
the previous beat. The detector keeps no history besides the timestamp of the
last beat and the number of beats emitted so far.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from ..config.settings import Settings
from ..config.constants import (
    LOW_BAND_BIN_COUNT,
    ENERGY_THRESHOLD,
    REFRACTORY_PERIOD_SECONDS,
    TIME_EPSILON,
)
from ..utils.logging import get_logger

logger = get_logger(__name__)

FrequencyFrame = Union[np.ndarray, Sequence[float]]


@dataclass(frozen=True)
class BeatEvent:
    """A detected beat."""
    timestamp_seconds: float
    sequence_number: int


@dataclass(frozen=True)
class DetectorState:
    """Snapshot of the detector state."""
    last_beat_timestamp: float = -math.inf
    total_beats_emitted: int = 0


class BeatDetector:
    """
    Bass-energy beat detector with a refractory period.

    One instance belongs to one audio source. Calls to ``analyze_frame`` for
    that source must be serialised and ``current_time_seconds`` must never
    decrease; the detector trusts the caller's clock.
    """

    def __init__(self,
                 low_band_bin_count: int = LOW_BAND_BIN_COUNT,
                 energy_threshold: float = ENERGY_THRESHOLD,
                 refractory_period_seconds: float = REFRACTORY_PERIOD_SECONDS):
        """
        Initialize beat detector.

        Args:
            low_band_bin_count: Number of low-frequency bins averaged per frame
            energy_threshold: Bass energy (0-255 scale) that must be exceeded
            refractory_period_seconds: Minimum spacing between two beats
        """
        self.low_band_bin_count = low_band_bin_count
        self.energy_threshold = energy_threshold
        self.refractory_period_seconds = refractory_period_seconds

        self._last_beat_timestamp = -math.inf
        self._total_beats_emitted = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> 'BeatDetector':
        """Create a detector from the beat section of the settings."""
        return cls(
            low_band_bin_count=settings.beat.low_band_bin_count,
            energy_threshold=settings.beat.energy_threshold,
            refractory_period_seconds=settings.beat.refractory_period_seconds,
        )

    @property
    def state(self) -> DetectorState:
        return DetectorState(
            last_beat_timestamp=self._last_beat_timestamp,
            total_beats_emitted=self._total_beats_emitted,
        )

    def bass_energy(self, frame: FrequencyFrame) -> float:
        """
        Mean magnitude over the low band of a frame.

        Frames shorter than the low band are averaged over the bins they
        have; an empty frame has no energy.
        """
        low_band = np.asarray(frame[:self.low_band_bin_count], dtype=np.float64)
        if low_band.size == 0:
            return 0.0
        return float(low_band.mean())

    def analyze_frame(self, frame: FrequencyFrame, current_time_seconds: float) -> Optional[BeatEvent]:
        """
        Classify one frame as beat or not-beat.

        Args:
            frame: Magnitudes per frequency bin, lowest frequency first
            current_time_seconds: Playback clock at the time of the frame

        Returns:
            The emitted beat event, or None
        """
        energy = self.bass_energy(frame)
        if not energy > self.energy_threshold:
            return None

        elapsed = current_time_seconds - self._last_beat_timestamp
        if not elapsed - self.refractory_period_seconds > TIME_EPSILON:
            return None

        self._last_beat_timestamp = current_time_seconds
        self._total_beats_emitted += 1

        event = BeatEvent(
            timestamp_seconds=current_time_seconds,
            sequence_number=self._total_beats_emitted,
        )
        logger.debug(
            f"Beat #{event.sequence_number} at {current_time_seconds:.3f}s "
            f"(bass energy {energy:.1f})"
        )
        return event

    def reset(self):
        """Forget the previous beat so the next qualifying frame triggers."""
        self._last_beat_timestamp = -math.inf
        self._total_beats_emitted = 0
