"""
Custom exceptions for the beat-timeline package.
"""


class BeatTimelineError(Exception):
    """Base exception for all beat-timeline errors."""
    pass


class ProcessingError(BeatTimelineError):
    """Error during audio analysis or session handling."""
    pass


class ValidationError(BeatTimelineError):
    """Error during input validation."""
    pass


class ConfigurationError(BeatTimelineError):
    """Error in configuration or settings."""
    pass


class AudioLoadError(ProcessingError):
    """Error loading or decoding audio files."""
    pass
