"""
Configuration management for beat-timeline.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict

from .constants import *
from ..utils.exceptions import ConfigurationError, ValidationError


@dataclass
class AnalysisSettings:
    """Frequency analyser settings."""
    fft_size: int = FFT_SIZE
    smoothing_time_constant: float = SMOOTHING_TIME_CONSTANT
    min_decibels: float = MIN_DECIBELS
    max_decibels: float = MAX_DECIBELS


@dataclass
class BeatSettings:
    """Beat detection settings."""
    low_band_bin_count: int = LOW_BAND_BIN_COUNT
    energy_threshold: float = ENERGY_THRESHOLD
    refractory_period_seconds: float = REFRACTORY_PERIOD_SECONDS


@dataclass
class WaveformSettings:
    """Waveform envelope settings."""
    column_count: int = ENVELOPE_COLUMN_COUNT
    height: int = ENVELOPE_HEIGHT


@dataclass
class PlaybackSettings:
    """Playback scheduling settings."""
    tick_rate_hz: float = TICK_RATE_HZ


@dataclass
class IndicatorSettings:
    """Beat indicator settings."""
    flash_duration_seconds: float = FLASH_DURATION_SECONDS
    thumbnail_count: int = THUMBNAIL_COUNT


# Environment variable -> (section, key, type)
ENVIRONMENT_OVERRIDES = {
    'BEAT_TIMELINE_ENERGY_THRESHOLD': ('beat', 'energy_threshold', float),
    'BEAT_TIMELINE_REFRACTORY_PERIOD': ('beat', 'refractory_period_seconds', float),
    'BEAT_TIMELINE_LOW_BAND_BINS': ('beat', 'low_band_bin_count', int),
    'BEAT_TIMELINE_FFT_SIZE': ('analysis', 'fft_size', int),
    'BEAT_TIMELINE_COLUMN_COUNT': ('waveform', 'column_count', int),
}


@dataclass
class Settings:
    """Main settings container."""
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    beat: BeatSettings = field(default_factory=BeatSettings)
    waveform: WaveformSettings = field(default_factory=WaveformSettings)
    playback: PlaybackSettings = field(default_factory=PlaybackSettings)
    indicator: IndicatorSettings = field(default_factory=IndicatorSettings)

    @classmethod
    def load_from_file(cls, config_path: str) -> 'Settings':
        """
        Load settings from a YAML configuration file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Settings instance

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

        if config_data is not None and not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

        return cls.from_dict(config_data or {})

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> 'Settings':
        """
        Create settings from a dictionary.

        Unknown sections are rejected so that typos do not silently fall back
        to defaults.

        Args:
            config_data: Configuration data dictionary

        Returns:
            Settings instance

        Raises:
            ConfigurationError: If a section or key is unknown or values are invalid
        """
        sections = {
            'analysis': AnalysisSettings,
            'beat': BeatSettings,
            'waveform': WaveformSettings,
            'playback': PlaybackSettings,
            'indicator': IndicatorSettings,
        }

        unknown = set(config_data) - set(sections)
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {', '.join(sorted(unknown))}")

        settings = cls()
        for name, section_cls in sections.items():
            if name not in config_data:
                continue
            try:
                setattr(settings, name, section_cls(**(config_data[name] or {})))
            except TypeError as e:
                raise ConfigurationError(f"Invalid '{name}' settings: {e}")

        settings.validate()
        return settings

    @classmethod
    def from_environment(cls) -> 'Settings':
        """
        Create settings from environment variables.

        Values that cannot be parsed are ignored.

        Returns:
            Settings instance with environment overrides
        """
        settings = cls()

        for variable, (section, key, cast) in ENVIRONMENT_OVERRIDES.items():
            if variable not in os.environ:
                continue
            try:
                setattr(getattr(settings, section), key, cast(os.environ[variable]))
            except ValueError:
                pass

        return settings

    def validate(self) -> 'Settings':
        """
        Check that the settings are usable together.

        Raises:
            ConfigurationError: If any value is out of range
        """
        from ..utils.validators import validate_analysis_parameters

        params = {
            'fft_size': self.analysis.fft_size,
            'smoothing_time_constant': self.analysis.smoothing_time_constant,
            'min_decibels': self.analysis.min_decibels,
            'max_decibels': self.analysis.max_decibels,
            'low_band_bin_count': self.beat.low_band_bin_count,
            'energy_threshold': self.beat.energy_threshold,
            'refractory_period_seconds': self.beat.refractory_period_seconds,
            'column_count': self.waveform.column_count,
            'tick_rate_hz': self.playback.tick_rate_hz,
        }
        try:
            validate_analysis_parameters(params)
        except ValidationError as e:
            raise ConfigurationError(str(e))

        if self.indicator.thumbnail_count <= 0:
            raise ConfigurationError("Thumbnail count must be positive")

        return self

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert settings to dictionary.

        Returns:
            Settings as dictionary
        """
        return asdict(self)

    def save_to_file(self, config_path: str):
        """
        Save settings to a YAML configuration file.

        Args:
            config_path: Path to save the configuration file

        Raises:
            ConfigurationError: If file cannot be saved
        """
        try:
            config_dir = Path(config_path).parent
            config_dir.mkdir(parents=True, exist_ok=True)

            with open(config_path, 'w') as f:
                yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=True)

        except OSError as e:
            raise ConfigurationError(f"Error saving configuration: {e}")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings.from_environment()
    return _settings


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from file or environment.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Settings instance
    """
    global _settings

    if config_path and os.path.exists(config_path):
        _settings = Settings.load_from_file(config_path)
    else:
        _settings = Settings.from_environment()

    return _settings
