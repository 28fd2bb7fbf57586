"""
Audio file loading and decoding.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional

import numpy as np
import librosa
import soundfile as sf

from ..config.settings import Settings, get_settings
from ..utils.exceptions import AudioLoadError, ValidationError
from ..utils.validators import validate_audio_file
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class DecodedAudio:
    """Fully decoded audio file."""
    channels: np.ndarray
    sample_rate: int
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def channel_count(self) -> int:
        return int(self.channels.shape[0])

    @property
    def sample_count(self) -> int:
        return int(self.channels.shape[1])

    @property
    def duration(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.sample_count / self.sample_rate

    def channel(self, index: int = 0) -> np.ndarray:
        """
        Samples of one channel as float32 in [-1.0, 1.0].

        Args:
            index: Channel index

        Returns:
            1-D sample buffer
        """
        if not 0 <= index < self.channel_count:
            raise ValidationError(
                f"Channel {index} out of range for {self.channel_count}-channel audio"
            )
        return np.clip(self.channels[index], -1.0, 1.0).astype(np.float32)


class AudioLoader:
    """
    Audio file loader with validation.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize audio loader.

        Args:
            settings: Application settings
        """
        self.settings = settings or get_settings()

    def load_audio(self, file_path: str, validate: bool = True) -> DecodedAudio:
        """
        Decode an audio file at its native sample rate, keeping all channels.

        Args:
            file_path: Path to audio file
            validate: Whether to validate the file before loading

        Returns:
            Decoded audio

        Raises:
            AudioLoadError: If decoding fails
            ValidationError: If validation fails
        """
        if validate:
            file_path = validate_audio_file(file_path)

        logger.info(f"Loading audio file: {file_path}")

        try:
            audio, sample_rate = librosa.load(file_path, sr=None, mono=False)
        except Exception as e:
            raise AudioLoadError(f"Failed to load audio file {file_path}: {e}") from e

        audio = np.atleast_2d(np.asarray(audio, dtype=np.float32))

        metadata = {
            'file_path': file_path,
            'file_name': Path(file_path).name,
            'sample_rate': int(sample_rate),
            'channels': int(audio.shape[0]),
            'frames': int(audio.shape[1]),
        }
        try:
            file_info = sf.info(file_path)
            metadata['file_format'] = file_info.format
            metadata['subtype'] = file_info.subtype
        except (sf.SoundFileError, RuntimeError) as e:
            # Compressed formats decoded through audioread have no header info here
            logger.debug(f"No soundfile header info for {file_path}: {e}")

        decoded = DecodedAudio(channels=audio, sample_rate=int(sample_rate), metadata=metadata)
        metadata['duration'] = decoded.duration

        if decoded.sample_count == 0:
            logger.warning(f"Audio file contains no samples: {file_path}")

        logger.info(
            f"Successfully loaded audio: {decoded.duration:.1f}s, "
            f"{decoded.sample_rate}Hz, {decoded.channel_count} channel(s)"
        )
        return decoded

    def get_audio_info(self, file_path: str) -> Dict[str, Any]:
        """
        Get audio file information without decoding the samples.

        Args:
            file_path: Path to audio file

        Returns:
            Dictionary with audio file information

        Raises:
            AudioLoadError: If reading file info fails
        """
        file_path = validate_audio_file(file_path)
        try:
            file_info = sf.info(file_path)
        except (sf.SoundFileError, RuntimeError) as e:
            raise AudioLoadError(f"Failed to read audio file info: {e}") from e

        return {
            'file_path': file_path,
            'file_name': Path(file_path).name,
            'sample_rate': file_info.samplerate,
            'channels': file_info.channels,
            'duration': file_info.duration,
            'frames': file_info.frames,
            'format': file_info.format,
            'subtype': file_info.subtype,
            'file_size': os.path.getsize(file_path)
        }
