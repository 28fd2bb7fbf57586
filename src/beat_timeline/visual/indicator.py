"""
Beat indicator: the display policy reacting to beat events.

Each beat flashes the indicator for a short window, bumps the beat counter
and moves the thumbnail cursor to the next slot.
"""

from typing import Optional

from ..config.settings import Settings
from ..config.constants import FLASH_DURATION_SECONDS, THUMBNAIL_COUNT
from ..core.beat_detector import BeatEvent


class BeatIndicator:
    """Visual state driven by beat events."""

    def __init__(self, flash_duration: float = FLASH_DURATION_SECONDS,
                 thumbnail_count: int = THUMBNAIL_COUNT):
        if thumbnail_count <= 0:
            raise ValueError("thumbnail_count must be positive")
        self.flash_duration = flash_duration
        self.thumbnail_count = thumbnail_count
        self.reset()

    @classmethod
    def from_settings(cls, settings: Settings) -> 'BeatIndicator':
        return cls(
            flash_duration=settings.indicator.flash_duration_seconds,
            thumbnail_count=settings.indicator.thumbnail_count,
        )

    def reset(self):
        self.beat_count = 0
        self.thumbnail_index = 0
        self._flash_until: Optional[float] = None

    def on_beat(self, event: BeatEvent):
        self.beat_count += 1
        self.thumbnail_index = (self.thumbnail_index + 1) % self.thumbnail_count
        self._flash_until = event.timestamp_seconds + self.flash_duration

    def is_flashing(self, now: float) -> bool:
        return self._flash_until is not None and now < self._flash_until
