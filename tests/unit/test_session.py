"""
Unit tests for the analysis session and the offline player.
"""

import numpy as np
import pytest

from beat_timeline.audio.source import AudioSource
from beat_timeline.core.beat_detector import BeatEvent, DetectorState
from beat_timeline.core.player import OfflinePlayer
from beat_timeline.core.session import AnalysisSession
from beat_timeline.core.timeline import TimelineState
from beat_timeline.utils.exceptions import ProcessingError


@pytest.fixture
def burst_source(settings, burst_audio, sample_rate):
    return AudioSource.from_array(burst_audio, sample_rate, settings)


@pytest.fixture
def session(settings):
    with AnalysisSession(settings, background_envelope=False) as session:
        yield session


class TestAnalysisSession:
    """Test cases for AnalysisSession."""

    def test_empty_session(self, session, frame_factory):
        assert session.source_id is None
        assert session.envelope is None
        assert session.wait_for_envelope() is None
        assert session.detector_state == DetectorState()
        assert session.analyze_frame(1, frame_factory(255), 0.0) is None

    def test_load_source_prepares_timeline(self, session, burst_source):
        source_id = session.load_source(burst_source)

        assert source_id == burst_source.source_id
        assert session.timeline.state is TimelineState.READY
        assert session.timeline.duration_seconds == pytest.approx(2.0)

    def test_inline_envelope_is_ready(self, session, burst_source):
        session.load_source(burst_source)

        envelope = session.envelope

        assert envelope is not None
        assert envelope.column_count == 600
        assert envelope.maxs.max() > 0.5

    def test_background_envelope(self, settings, burst_source):
        with AnalysisSession(settings) as session:
            session.load_source(burst_source)

            envelope = session.wait_for_envelope(timeout=10)

            assert envelope is not None
            assert envelope.column_count == settings.waveform.column_count
            assert session.envelope is envelope

    def test_frames_emit_events(self, session, burst_source, frame_factory):
        source_id = session.load_source(burst_source)

        event = session.analyze_frame(source_id, frame_factory(255), 0.5)

        assert event == BeatEvent(timestamp_seconds=0.5, sequence_number=1)
        assert session.beat_events == [event]
        assert session.detector_state.total_beats_emitted == 1

    def test_stale_frames_are_dropped(self, session, settings, burst_source, burst_audio,
                                      sample_rate, frame_factory):
        old_id = session.load_source(burst_source)
        new_source = AudioSource.from_array(burst_audio, sample_rate, settings)
        new_id = session.load_source(new_source)

        assert session.analyze_frame(old_id, frame_factory(255), 0.1) is None
        assert session.detector_state.total_beats_emitted == 0

        event = session.analyze_frame(new_id, frame_factory(255), 0.1)
        assert event.sequence_number == 1

    def test_new_source_resets_detector(self, session, settings, burst_source, burst_audio,
                                        sample_rate, frame_factory):
        first_id = session.load_source(burst_source)
        session.analyze_frame(first_id, frame_factory(255), 1.0)

        second_id = session.load_source(AudioSource.from_array(burst_audio, sample_rate, settings))
        event = session.analyze_frame(second_id, frame_factory(255), 1.0)

        assert event == BeatEvent(timestamp_seconds=1.0, sequence_number=1)
        assert session.beat_events == [event]

    def test_new_source_replaces_timeline(self, session, settings, burst_source, sample_rate):
        session.load_source(burst_source)
        old_timeline = session.timeline
        old_timeline.play()
        old_timeline.tick(1.5)

        session.load_source(AudioSource.from_array(np.zeros(sample_rate), sample_rate, settings))

        assert session.timeline is not old_timeline
        assert session.timeline.current_seconds == 0.0
        assert session.timeline.duration_seconds == pytest.approx(1.0)

    def test_listeners_receive_events(self, session, burst_source, frame_factory):
        received = []
        session.add_beat_listener(received.append)
        source_id = session.load_source(burst_source)

        session.analyze_frame(source_id, frame_factory(255), 0.0)
        session.analyze_frame(source_id, frame_factory(255), 0.1)
        session.remove_beat_listener(received.append)
        session.analyze_frame(source_id, frame_factory(255), 1.0)

        assert [e.sequence_number for e in received] == [1]

    def test_failing_listener_does_not_stop_analysis(self, session, burst_source, frame_factory, caplog):
        received = []

        def broken(event):
            raise RuntimeError("display gone")

        session.add_beat_listener(broken)
        session.add_beat_listener(received.append)
        source_id = session.load_source(burst_source)

        event = session.analyze_frame(source_id, frame_factory(255), 0.0)

        assert event.sequence_number == 1
        assert received == [event]
        assert session.beat_events == [event]
        assert "display gone" in caplog.text

    def test_unload(self, session, burst_source, frame_factory):
        source_id = session.load_source(burst_source)

        session.unload()

        assert session.source_id is None
        assert session.envelope is None
        assert session.analyze_frame(source_id, frame_factory(255), 0.0) is None

    def test_closed_session_rejects_sources(self, settings, burst_source):
        session = AnalysisSession(settings)
        session.close()

        with pytest.raises(ProcessingError):
            session.load_source(burst_source)

    def test_close_is_idempotent(self, settings):
        session = AnalysisSession(settings)

        session.close()
        session.close()


class TestOfflinePlayer:
    """Test cases for OfflinePlayer."""

    def test_detects_one_beat_per_burst(self, session, burst_source, burst_schedule):
        burst_times, burst_length = burst_schedule
        player = OfflinePlayer(session, burst_source)

        events = player.run()

        assert [e.sequence_number for e in events] == list(range(1, len(burst_times) + 1))
        for event, burst_time in zip(events, burst_times):
            assert burst_time <= event.timestamp_seconds <= burst_time + burst_length
        assert session.beat_events == events

    def test_run_survives_failing_listener(self, session, burst_source, burst_schedule):
        def broken(event):
            raise ValueError("listener bug")

        session.add_beat_listener(broken)

        events = OfflinePlayer(session, burst_source).run()

        assert len(events) == len(burst_schedule[0])
        assert session.timeline.state is TimelineState.ENDED

    def test_run_ends_timeline(self, session, burst_source):
        player = OfflinePlayer(session, burst_source)

        player.run()

        assert session.timeline.state is TimelineState.ENDED
        assert session.timeline.current_seconds == session.timeline.duration_seconds

    def test_silence_has_no_beats(self, session, settings, sample_rate):
        source = AudioSource.from_array(np.zeros(sample_rate), sample_rate, settings)

        assert OfflinePlayer(session, source).run() == []

    def test_treble_has_no_beats(self, session, settings, treble_audio, sample_rate):
        source = AudioSource.from_array(treble_audio, sample_rate, settings)

        assert OfflinePlayer(session, source).run() == []

    def test_tick_does_nothing_until_played(self, session, burst_source):
        player = OfflinePlayer(session, burst_source)

        assert player.tick() is None
        assert session.timeline.current_seconds == 0.0

    def test_max_ticks(self, session, burst_source):
        player = OfflinePlayer(session, burst_source, tick_rate_hz=60.0)

        player.run(max_ticks=30)

        assert session.timeline.state is TimelineState.PLAYING
        assert session.timeline.current_seconds == pytest.approx(0.5)

    def test_seek_is_clamped(self, session, burst_source):
        player = OfflinePlayer(session, burst_source)

        assert player.seek(-5) == 0.0
        assert player.seek(500) == pytest.approx(2.0)

    def test_skipped_ticks_still_advance(self, session, burst_source, burst_schedule):
        player = OfflinePlayer(session, burst_source, skip_every=2)

        events = player.run()

        assert session.timeline.state is TimelineState.ENDED
        assert len(events) <= len(burst_schedule[0])

    def test_retired_player_cannot_touch_new_source(self, session, settings, burst_source,
                                                    burst_audio, sample_rate):
        old_player = OfflinePlayer(session, burst_source)
        old_player.run(max_ticks=10)

        new_source = AudioSource.from_array(burst_audio, sample_rate, settings)
        session.load_source(new_source)
        for _ in range(60):
            old_player.tick()

        assert session.beat_events == []
        assert session.timeline.state is TimelineState.READY
        assert session.timeline.current_seconds == 0.0

    def test_requires_source(self, session):
        with pytest.raises(ProcessingError):
            OfflinePlayer(session)
