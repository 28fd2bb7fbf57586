"""
Pytest configuration and fixtures for beat-timeline tests.
"""

import pytest
import numpy as np
import soundfile as sf
from pathlib import Path

# Add src to path for testing
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from beat_timeline.config.settings import Settings


SAMPLE_RATE = 22050
BURST_TIMES = [0.25, 0.75, 1.25, 1.75]
BURST_LENGTH = 0.15


@pytest.fixture
def settings():
    """Create test settings with the reference defaults."""
    return Settings()


@pytest.fixture
def sample_rate():
    return SAMPLE_RATE


def create_burst_audio(duration: float = 2.0,
                       sample_rate: int = SAMPLE_RATE,
                       burst_times=BURST_TIMES,
                       burst_length: float = BURST_LENGTH,
                       seed: int = 7) -> np.ndarray:
    """Silence with loud broadband noise bursts at ``burst_times``."""
    rng = np.random.default_rng(seed)
    audio = np.zeros(int(duration * sample_rate), dtype=np.float32)
    burst_samples = int(burst_length * sample_rate)

    for burst_time in burst_times:
        start = int(burst_time * sample_rate)
        end = min(start + burst_samples, len(audio))
        audio[start:end] = rng.uniform(-0.9, 0.9, end - start)

    return audio


@pytest.fixture
def burst_audio():
    """Two seconds of audio with four noise bursts."""
    return create_burst_audio()


@pytest.fixture
def treble_audio():
    """One second of a treble-only 8 kHz tone."""
    t = np.arange(SAMPLE_RATE) / SAMPLE_RATE
    return (0.5 * np.sin(2 * np.pi * 8000 * t)).astype(np.float32)


@pytest.fixture
def burst_wav(tmp_path, burst_audio):
    """Burst audio written to a temporary WAV file."""
    path = tmp_path / "bursts.wav"
    sf.write(str(path), burst_audio, SAMPLE_RATE)
    return str(path)


@pytest.fixture
def stereo_wav(tmp_path):
    """Stereo WAV whose left channel is a ramp and right channel is silent."""
    left = np.linspace(-0.5, 0.5, SAMPLE_RATE, dtype=np.float32)
    right = np.zeros(SAMPLE_RATE, dtype=np.float32)
    path = tmp_path / "stereo.wav"
    sf.write(str(path), np.column_stack([left, right]), SAMPLE_RATE)
    return str(path)


def make_frame(bass_level: float, bins: int = 128, low_band: int = 10, rest_level: float = 0.0) -> np.ndarray:
    """Frequency frame whose low band is flat at ``bass_level``."""
    frame = np.full(bins, rest_level, dtype=np.float64)
    frame[:low_band] = bass_level
    return frame


@pytest.fixture
def frame_factory():
    """Factory for synthetic frequency frames."""
    return make_frame


@pytest.fixture
def burst_schedule():
    """Start times and length of the bursts in ``burst_audio``."""
    return BURST_TIMES, BURST_LENGTH
