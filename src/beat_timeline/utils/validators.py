"""
Validation utilities for beat-timeline.
"""

import numbers
import os
from pathlib import Path
from typing import Dict, Any

from .exceptions import ValidationError
from ..config.constants import SUPPORTED_AUDIO_FORMATS, MIN_FFT_SIZE, MAX_FFT_SIZE


def validate_audio_file(file_path: str) -> str:
    """
    Validate that an audio file exists and has a supported format.

    Args:
        file_path: Path to the audio file

    Returns:
        Absolute path to the validated file

    Raises:
        ValidationError: If file doesn't exist or has unsupported format
    """
    if not os.path.exists(file_path):
        raise ValidationError(f"Audio file not found: {file_path}")

    file_ext = Path(file_path).suffix.lower()

    if file_ext not in SUPPORTED_AUDIO_FORMATS:
        raise ValidationError(
            f"Unsupported audio format: {file_ext}. "
            f"Supported formats: {', '.join(SUPPORTED_AUDIO_FORMATS)}"
        )

    return os.path.abspath(file_path)


def validate_column_count(column_count: int) -> int:
    """
    Validate the number of envelope columns.

    Raises:
        ValidationError: If the count is not a positive integer
    """
    if isinstance(column_count, bool) or not isinstance(column_count, numbers.Integral) or column_count <= 0:
        raise ValidationError(f"Column count must be a positive integer, got {column_count!r}")
    return int(column_count)


def validate_fft_size(fft_size: int) -> int:
    """
    Validate a transform size: a power of two within the analyser limits.

    Raises:
        ValidationError: If the size is not accepted
    """
    if (isinstance(fft_size, bool) or not isinstance(fft_size, numbers.Integral)
            or not MIN_FFT_SIZE <= fft_size <= MAX_FFT_SIZE
            or fft_size & (fft_size - 1)):
        raise ValidationError(
            f"FFT size must be a power of two between {MIN_FFT_SIZE} and {MAX_FFT_SIZE}, got {fft_size!r}"
        )
    return fft_size


def validate_analysis_parameters(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate analysis parameters.

    Args:
        params: Flat mapping of parameter names to values

    Returns:
        Validated parameters

    Raises:
        ValidationError: If parameters are invalid
    """
    validated = params.copy()

    if 'fft_size' in params:
        validate_fft_size(params['fft_size'])

    if 'smoothing_time_constant' in params:
        tau = params['smoothing_time_constant']
        if not isinstance(tau, (int, float)) or not 0 <= tau <= 1:
            raise ValidationError("Smoothing time constant must be a number between 0 and 1")

    if 'min_decibels' in params and 'max_decibels' in params:
        if params['min_decibels'] >= params['max_decibels']:
            raise ValidationError("min_decibels must be lower than max_decibels")

    if 'low_band_bin_count' in params:
        bins = params['low_band_bin_count']
        if isinstance(bins, bool) or not isinstance(bins, numbers.Integral) or bins <= 0:
            raise ValidationError("Low band bin count must be a positive integer")
        if 'fft_size' in params and bins > params['fft_size'] // 2:
            raise ValidationError(
                f"Low band bin count {bins} exceeds the {params['fft_size'] // 2} available bins"
            )

    if 'energy_threshold' in params:
        threshold = params['energy_threshold']
        if not isinstance(threshold, (int, float)) or threshold < 0:
            raise ValidationError("Energy threshold must be a non-negative number")

    if 'refractory_period_seconds' in params:
        period = params['refractory_period_seconds']
        if not isinstance(period, (int, float)) or period < 0:
            raise ValidationError("Refractory period must be a non-negative number of seconds")

    if 'column_count' in params:
        validate_column_count(params['column_count'])

    if 'tick_rate_hz' in params:
        rate = params['tick_rate_hz']
        if not isinstance(rate, (int, float)) or rate <= 0:
            raise ValidationError("Tick rate must be a positive number")

    return validated
