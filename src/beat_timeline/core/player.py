"""
Offline playback driver.

Replays a decoded source at a nominal display rate, feeding one frequency
frame per tick to the analysis session and advancing the timeline, the same
way a real-time host would on every refresh.
"""

from typing import List, Optional

from ..audio.source import AudioSource
from ..utils.exceptions import ProcessingError
from ..utils.logging import get_logger
from .beat_detector import BeatEvent
from .session import AnalysisSession
from .timeline import TimelineState

logger = get_logger(__name__)


class OfflinePlayer:
    """
    Tick-driven playback of one source without audio output.
    """

    def __init__(self, session: AnalysisSession, source: Optional[AudioSource] = None,
                 tick_rate_hz: Optional[float] = None, skip_every: int = 0):
        """
        Initialize offline player.

        Args:
            session: Session receiving the frames
            source: Source to play, loaded into the session if not already current
            tick_rate_hz: Ticks per second (default from settings)
            skip_every: Drop every n-th tick to mimic a loaded scheduler (0 = never)
        """
        self.session = session
        self.tick_rate_hz = tick_rate_hz or session.settings.playback.tick_rate_hz
        if self.tick_rate_hz <= 0:
            raise ProcessingError(f"Tick rate must be positive, got {self.tick_rate_hz}")
        self.skip_every = skip_every
        self._tick_count = 0

        if source is not None and session.source_id != source.source_id:
            session.load_source(source)
        if session.source is None:
            raise ProcessingError("OfflinePlayer needs a loaded source")

        self.source = session.source
        self.source_id = session.source_id
        self.timeline = session.timeline

    @property
    def tick_interval(self) -> float:
        return 1.0 / self.tick_rate_hz

    def seek(self, target_seconds: float) -> float:
        """Seek the timeline and restart frequency smoothing at the new position."""
        position = self.timeline.seek(target_seconds)
        self.source.reset_analysis()
        return position

    def tick(self, dt: Optional[float] = None) -> Optional[BeatEvent]:
        """
        Advance playback by ``dt`` seconds and analyse the frame at the new
        position.

        Returns:
            The beat emitted on this tick, if any
        """
        timeline = self.timeline
        if timeline.state is not TimelineState.PLAYING:
            return None

        dt = self.tick_interval if dt is None else dt
        position = timeline.current_seconds + dt
        duration = timeline.duration_seconds

        if position >= duration:
            timeline.end()
            return None

        timeline.tick(position)
        self._tick_count += 1
        if self.skip_every and self._tick_count % self.skip_every == 0:
            return None

        frame = self.source.frame_at(position)
        return self.session.analyze_frame(self.source_id, frame, position)

    def run(self, max_ticks: Optional[int] = None) -> List[BeatEvent]:
        """
        Play from the current position until the end of the track.

        Args:
            max_ticks: Stop after this many ticks

        Returns:
            Beat events emitted during this run
        """
        timeline = self.timeline
        if not timeline.play():
            logger.warning(f"Cannot play source {self.source_id} in state {timeline.state.value}")
            return []

        events = []
        ticks = 0
        while timeline.state is TimelineState.PLAYING:
            if max_ticks is not None and ticks >= max_ticks:
                break
            event = self.tick()
            if event is not None:
                events.append(event)
            ticks += 1

        logger.info(f"Replayed {ticks} ticks, {len(events)} beat(s) detected")
        return events
