"""
Byte-scaled frequency analysis of the playing signal.

Each frame covers the last ``fft_size`` samples before the playback position.
Magnitudes are Blackman-windowed, smoothed against the previous frame,
converted to decibels and mapped linearly from ``[min_decibels, max_decibels]``
onto ``0..255``.
"""

from typing import Optional

import numpy as np
from scipy.signal import get_window

from ..config.settings import Settings
from ..config.constants import (
    FFT_SIZE,
    SMOOTHING_TIME_CONSTANT,
    MIN_DECIBELS,
    MAX_DECIBELS,
    BYTE_MAGNITUDE_MAX,
)
from ..utils.exceptions import ValidationError
from ..utils.validators import validate_fft_size
from ..utils.logging import get_logger

logger = get_logger(__name__)


class FrequencyAnalyzer:
    """
    Produces one frequency frame per analysis tick.

    The analyzer is stateful (smoothing), so each audio source needs its own.
    """

    def __init__(self,
                 fft_size: int = FFT_SIZE,
                 smoothing_time_constant: float = SMOOTHING_TIME_CONSTANT,
                 min_decibels: float = MIN_DECIBELS,
                 max_decibels: float = MAX_DECIBELS):
        """
        Initialize frequency analyzer.

        Args:
            fft_size: Transform size, a power of two
            smoothing_time_constant: Weight of the previous frame, in [0, 1]
            min_decibels: Level mapped to byte 0
            max_decibels: Level mapped to byte 255
        """
        self.fft_size = validate_fft_size(fft_size)
        if not 0.0 <= smoothing_time_constant <= 1.0:
            raise ValidationError("Smoothing time constant must be between 0 and 1")
        if min_decibels >= max_decibels:
            raise ValidationError("min_decibels must be lower than max_decibels")

        self.smoothing_time_constant = smoothing_time_constant
        self.min_decibels = min_decibels
        self.max_decibels = max_decibels

        # Periodic Blackman window
        self.window = get_window('blackman', self.fft_size, fftbins=True)
        self._previous = np.zeros(self.frequency_bin_count, dtype=np.float64)

    @classmethod
    def from_settings(cls, settings: Settings) -> 'FrequencyAnalyzer':
        """Create an analyzer from the analysis section of the settings."""
        return cls(
            fft_size=settings.analysis.fft_size,
            smoothing_time_constant=settings.analysis.smoothing_time_constant,
            min_decibels=settings.analysis.min_decibels,
            max_decibels=settings.analysis.max_decibels,
        )

    @property
    def frequency_bin_count(self) -> int:
        return self.fft_size // 2

    def reset(self):
        """Drop smoothing history, e.g. after a seek."""
        self._previous = np.zeros(self.frequency_bin_count, dtype=np.float64)

    def block_at(self, samples: np.ndarray, end_index: int) -> np.ndarray:
        """
        The ``fft_size`` samples ending just before ``end_index``.

        Positions before the start of the buffer read as silence.
        """
        end_index = max(0, min(int(end_index), len(samples)))
        start_index = end_index - self.fft_size

        block = np.zeros(self.fft_size, dtype=np.float64)
        if end_index > 0:
            available = samples[max(0, start_index):end_index]
            block[self.fft_size - len(available):] = available
        return block

    def magnitude_spectrum(self, block: np.ndarray) -> np.ndarray:
        """Normalised magnitudes of the windowed block, one per bin."""
        spectrum = np.fft.rfft(np.asarray(block, dtype=np.float64) * self.window)
        return np.abs(spectrum[:self.frequency_bin_count]) / self.fft_size

    def to_bytes(self, magnitudes: np.ndarray) -> np.ndarray:
        """Map linear magnitudes onto the 0-255 decibel scale."""
        with np.errstate(divide='ignore'):
            decibels = 20.0 * np.log10(magnitudes)
        scale = BYTE_MAGNITUDE_MAX / (self.max_decibels - self.min_decibels)
        scaled = np.floor(scale * (decibels - self.min_decibels))
        scaled = np.nan_to_num(scaled, nan=0.0, neginf=0.0, posinf=float(BYTE_MAGNITUDE_MAX))
        return np.clip(scaled, 0, BYTE_MAGNITUDE_MAX).astype(np.uint8)

    def analyze(self, block: np.ndarray) -> np.ndarray:
        """
        Compute the next frame from one block of samples.

        Args:
            block: ``fft_size`` samples

        Returns:
            ``uint8`` magnitudes, ``frequency_bin_count`` long
        """
        magnitudes = self.magnitude_spectrum(block)
        tau = self.smoothing_time_constant
        smoothed = tau * self._previous + (1.0 - tau) * magnitudes
        smoothed[~np.isfinite(smoothed)] = 0.0
        self._previous = smoothed
        return self.to_bytes(smoothed)

    def frame_at(self, samples: np.ndarray, sample_rate: int, position_seconds: float,
                 end_index: Optional[int] = None) -> np.ndarray:
        """
        Frame for the playback position ``position_seconds``.

        Args:
            samples: Mono sample buffer
            sample_rate: Sample rate of the buffer
            position_seconds: Playback position
            end_index: Explicit sample index, overrides the position

        Returns:
            Frequency frame
        """
        if end_index is None:
            end_index = int(round(max(0.0, position_seconds) * sample_rate))
        return self.analyze(self.block_at(samples, end_index))
