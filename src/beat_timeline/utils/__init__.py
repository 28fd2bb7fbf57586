"""
Utility functions and helper classes.
"""

from .logging import setup_logging, get_logger
from .validators import validate_audio_file, validate_analysis_parameters
from .exceptions import (
    BeatTimelineError,
    ProcessingError,
    ValidationError,
    ConfigurationError,
    AudioLoadError,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "validate_audio_file",
    "validate_analysis_parameters",
    "BeatTimelineError",
    "ProcessingError",
    "ValidationError",
    "ConfigurationError",
    "AudioLoadError",
]
