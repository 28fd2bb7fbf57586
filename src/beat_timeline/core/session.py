"""
Analysis session: the owned resource binding one audio source to its beat
detector, playback timeline and waveform envelope.
"""

import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Callable, List, Optional

from ..audio.source import AudioSource
from ..config.settings import Settings, get_settings
from ..utils.exceptions import ProcessingError
from ..utils.logging import get_logger
from .beat_detector import BeatDetector, BeatEvent, DetectorState, FrequencyFrame
from .timeline import PlaybackTimeline
from .waveform import Envelope, WaveformReducer

logger = get_logger(__name__)

BeatListener = Callable[[BeatEvent], None]


class AnalysisSession:
    """
    Holds the analysis state of the current source.

    Loading a source retires the previous detector and timeline under the
    session lock before the new ones accept frames. Frames tagged with a
    retired source id are dropped.
    """

    def __init__(self, settings: Optional[Settings] = None, background_envelope: bool = True):
        """
        Initialize analysis session.

        Args:
            settings: Application settings
            background_envelope: Reduce the envelope on a worker thread
        """
        self.settings = settings or get_settings()
        self.background_envelope = background_envelope
        self.reducer = WaveformReducer(self.settings)

        self._lock = threading.RLock()
        self._executor: Optional[ThreadPoolExecutor] = None
        if background_envelope:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='envelope')
        self._closed = False

        self._source: Optional[AudioSource] = None
        self._detector: Optional[BeatDetector] = None
        self._timeline = PlaybackTimeline()
        self._envelope_future: Optional[Future] = None
        self._beat_events: List[BeatEvent] = []
        self._listeners: List[BeatListener] = []

    def __enter__(self) -> 'AnalysisSession':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def source(self) -> Optional[AudioSource]:
        return self._source

    @property
    def source_id(self) -> Optional[int]:
        with self._lock:
            return self._source.source_id if self._source else None

    @property
    def timeline(self) -> PlaybackTimeline:
        with self._lock:
            return self._timeline

    @property
    def detector_state(self) -> DetectorState:
        with self._lock:
            if self._detector is None:
                return DetectorState()
            return self._detector.state

    @property
    def beat_events(self) -> List[BeatEvent]:
        """Events emitted for the current source, in emission order."""
        with self._lock:
            return list(self._beat_events)

    @property
    def envelope(self) -> Optional[Envelope]:
        """The waveform envelope, or None while it is not ready."""
        with self._lock:
            future = self._envelope_future
        if future is None or not future.done() or future.cancelled():
            return None
        return future.result()

    def wait_for_envelope(self, timeout: Optional[float] = None) -> Optional[Envelope]:
        """
        Block until the envelope of the current source is ready.

        Returns:
            The envelope, or None if no source is loaded, it was replaced or
            the timeout expired

        Raises:
            ProcessingError: If the reduction itself failed
        """
        with self._lock:
            future = self._envelope_future
        if future is None:
            return None
        try:
            return future.result(timeout=timeout)
        except (CancelledError, FuturesTimeoutError):
            return None
        except Exception as e:
            raise ProcessingError(f"Envelope extraction failed: {e}") from e

    def add_beat_listener(self, listener: BeatListener):
        """Call ``listener`` with every emitted beat; its exceptions are logged, not raised."""
        with self._lock:
            self._listeners.append(listener)

    def remove_beat_listener(self, listener: BeatListener):
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def load_source(self, source: AudioSource) -> int:
        """
        Make ``source`` the current source.

        The previous detector, timeline and pending envelope job are discarded
        and fresh ones are created before any frame of the new source is
        accepted.

        Args:
            source: Decoded audio source

        Returns:
            The id frames of this source must carry

        Raises:
            ProcessingError: If the session is closed
        """
        with self._lock:
            if self._closed:
                raise ProcessingError("Cannot load a source into a closed session")

            if self._envelope_future is not None:
                self._envelope_future.cancel()

            self._source = source
            self._detector = BeatDetector.from_settings(self.settings)
            self._timeline = PlaybackTimeline()
            self._timeline.load(source.duration)
            self._beat_events = []
            source.reset_analysis()

            if self._executor is not None:
                self._envelope_future = self._executor.submit(self.reducer.reduce, source.samples)
            else:
                future = Future()
                future.set_result(self.reducer.reduce(source.samples))
                self._envelope_future = future

            logger.info(f"Loaded source {source!r}")
            return source.source_id

    def unload(self):
        """Detach the current source without loading another."""
        with self._lock:
            if self._envelope_future is not None:
                self._envelope_future.cancel()
            self._envelope_future = None
            self._source = None
            self._detector = None
            self._timeline = PlaybackTimeline()
            self._beat_events = []

    def analyze_frame(self, source_id: int, frame: FrequencyFrame,
                      current_time_seconds: float) -> Optional[BeatEvent]:
        """
        Feed one frame of the source ``source_id`` to its beat detector.

        Args:
            source_id: Id returned by ``load_source``
            frame: Frequency frame
            current_time_seconds: Playback clock of the frame

        Returns:
            The emitted beat event, or None (also for dropped frames)
        """
        with self._lock:
            if self._detector is None or self._source is None or source_id != self._source.source_id:
                logger.debug(f"Dropping frame from retired source {source_id}")
                return None

            event = self._detector.analyze_frame(frame, current_time_seconds)
            if event is None:
                return None

            self._beat_events.append(event)
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Beat listener {listener!r} failed on beat #{event.sequence_number}: {e}")
        return event

    def close(self):
        """Release the worker pool and drop the current source."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.unload()
            executor = self._executor
            self._executor = None
        if executor is not None:
            executor.shutdown(wait=True)
