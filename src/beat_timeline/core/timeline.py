"""
Playback position tracking.

The timeline reconciles transport requests (play, pause, seek), natural
end-of-media and periodic position ticks into one position value. A duration
of 0.0 means the duration is not known yet.
"""

import math
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..utils.logging import get_logger

logger = get_logger(__name__)

UNKNOWN_DURATION = 0.0


class TimelineState(Enum):
    """Playback states."""
    IDLE = "idle"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


@dataclass(frozen=True)
class TimelinePosition:
    """Snapshot of the playback position."""
    current_seconds: float
    duration_seconds: float
    state: TimelineState

    @property
    def duration_known(self) -> bool:
        return self.duration_seconds > UNKNOWN_DURATION


def format_time(seconds: float) -> str:
    """Format a position as ``m:ss``."""
    if not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


class PlaybackTimeline:
    """
    Single source of truth for the playback position of one source.

    Invariant: ``0 <= current <= duration`` whenever the duration is known.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._state = TimelineState.IDLE
        self._current = 0.0
        self._duration = UNKNOWN_DURATION
        self._loaded = False

    @property
    def state(self) -> TimelineState:
        with self._lock:
            return self._state

    @property
    def current_seconds(self) -> float:
        with self._lock:
            return self._current

    @property
    def duration_seconds(self) -> float:
        with self._lock:
            return self._duration

    @property
    def position(self) -> TimelinePosition:
        with self._lock:
            return TimelinePosition(self._current, self._duration, self._state)

    def progress_ratio(self) -> Optional[float]:
        """
        Fraction of the track played, or None while the duration is unknown.
        """
        with self._lock:
            if self._duration <= UNKNOWN_DURATION:
                return None
            return self._current / self._duration

    def _clamp(self, seconds: float) -> float:
        if math.isnan(seconds):
            seconds = 0.0
        seconds = max(0.0, seconds)
        if self._duration > UNKNOWN_DURATION:
            seconds = min(seconds, self._duration)
        return seconds

    def load(self, duration_seconds: Optional[float] = None):
        """
        Attach a new source, discarding the previous position.

        Args:
            duration_seconds: Track duration if already known
        """
        with self._lock:
            self._state = TimelineState.IDLE
            self._current = 0.0
            self._duration = UNKNOWN_DURATION
            self._loaded = True
            if duration_seconds is not None and duration_seconds > 0:
                self._duration = float(duration_seconds)
                self._state = TimelineState.READY
        logger.debug(f"Timeline loaded (duration {duration_seconds})")

    def set_duration(self, duration_seconds: float):
        """Record the duration once the source metadata has been resolved."""
        with self._lock:
            if not self._loaded or not duration_seconds > 0:
                return
            self._duration = float(duration_seconds)
            self._current = self._clamp(self._current)
            if self._state is TimelineState.IDLE:
                self._state = TimelineState.READY

    def unload(self):
        """Detach the source."""
        with self._lock:
            self._state = TimelineState.IDLE
            self._current = 0.0
            self._duration = UNKNOWN_DURATION
            self._loaded = False

    def play(self) -> bool:
        """
        Start or resume playback.

        Returns:
            True if the timeline is playing afterwards
        """
        with self._lock:
            if self._state in (TimelineState.READY, TimelineState.PAUSED):
                self._state = TimelineState.PLAYING
            elif self._state is TimelineState.ENDED:
                # Playing a finished track starts over
                self._current = 0.0
                self._state = TimelineState.PLAYING
            return self._state is TimelineState.PLAYING

    def pause(self):
        with self._lock:
            if self._state is TimelineState.PLAYING:
                self._state = TimelineState.PAUSED

    def toggle(self) -> TimelineState:
        """Play when paused, pause when playing."""
        if self.state is TimelineState.PLAYING:
            self.pause()
        else:
            self.play()
        return self.state

    def seek(self, target_seconds: float) -> float:
        """
        Move the playhead, clamping the target to ``[0, duration]``.

        Seeking keeps the play/pause state, except that seeking a finished
        track leaves it paused at the target.

        Returns:
            The applied position
        """
        with self._lock:
            if self._state is TimelineState.IDLE:
                return self._current
            self._current = self._clamp(target_seconds)
            if self._state is TimelineState.ENDED:
                self._state = TimelineState.PAUSED
            return self._current

    def tick(self, position_seconds: float):
        """Periodic position update from the playback clock."""
        with self._lock:
            if self._state is TimelineState.IDLE:
                return
            self._current = self._clamp(position_seconds)

    def end(self):
        """Natural end of media."""
        with self._lock:
            if self._state is not TimelineState.PLAYING:
                return
            self._current = self._duration
            self._state = TimelineState.ENDED
        logger.debug("Playback reached end of media")
