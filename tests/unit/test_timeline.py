"""
Unit tests for the playback timeline.
"""

import pytest

from beat_timeline.core.timeline import (
    PlaybackTimeline,
    TimelinePosition,
    TimelineState,
    format_time,
)


@pytest.fixture
def timeline():
    """Timeline loaded with a two-minute track."""
    timeline = PlaybackTimeline()
    timeline.load(120.0)
    return timeline


class TestPlaybackTimeline:
    """Test cases for PlaybackTimeline."""

    def test_starts_idle(self):
        timeline = PlaybackTimeline()

        assert timeline.position == TimelinePosition(0.0, 0.0, TimelineState.IDLE)
        assert timeline.progress_ratio() is None

    def test_load_with_known_duration_is_ready(self, timeline):
        assert timeline.state is TimelineState.READY
        assert timeline.duration_seconds == 120.0
        assert timeline.current_seconds == 0.0

    def test_unknown_duration_until_metadata(self):
        timeline = PlaybackTimeline()
        timeline.load()

        assert timeline.state is TimelineState.IDLE
        assert timeline.duration_seconds == 0.0
        assert timeline.progress_ratio() is None
        assert not timeline.position.duration_known

        timeline.set_duration(90.0)

        assert timeline.state is TimelineState.READY
        assert timeline.progress_ratio() == 0.0

    def test_set_duration_without_source_is_ignored(self):
        timeline = PlaybackTimeline()

        timeline.set_duration(90.0)

        assert timeline.state is TimelineState.IDLE
        assert timeline.duration_seconds == 0.0

    def test_play_and_pause(self, timeline):
        assert timeline.play()
        assert timeline.state is TimelineState.PLAYING

        timeline.pause()
        assert timeline.state is TimelineState.PAUSED

        timeline.play()
        assert timeline.state is TimelineState.PLAYING

    def test_toggle(self, timeline):
        assert timeline.toggle() is TimelineState.PLAYING
        assert timeline.toggle() is TimelineState.PAUSED

    def test_play_while_idle_is_ignored(self):
        timeline = PlaybackTimeline()

        assert not timeline.play()
        assert timeline.state is TimelineState.IDLE

    def test_pause_when_not_playing_is_ignored(self, timeline):
        timeline.pause()

        assert timeline.state is TimelineState.READY

    def test_seek_clamps_low(self, timeline):
        assert timeline.seek(-5) == 0.0
        assert timeline.current_seconds == 0.0

    def test_seek_clamps_high(self, timeline):
        assert timeline.seek(500) == 120.0
        assert timeline.current_seconds == 120.0

    def test_seek_while_playing_keeps_playing(self, timeline):
        timeline.play()

        timeline.seek(30.0)

        assert timeline.state is TimelineState.PLAYING
        assert timeline.current_seconds == 30.0

    def test_seek_while_paused_stays_paused(self, timeline):
        timeline.play()
        timeline.pause()

        timeline.seek(45.0)

        assert timeline.state is TimelineState.PAUSED
        assert timeline.current_seconds == 45.0

    def test_seek_while_idle_is_ignored(self):
        timeline = PlaybackTimeline()

        assert timeline.seek(10.0) == 0.0
        assert timeline.state is TimelineState.IDLE

    def test_end_snaps_to_duration(self, timeline):
        timeline.play()
        timeline.tick(119.98)

        timeline.end()

        assert timeline.state is TimelineState.ENDED
        assert timeline.current_seconds == 120.0
        assert timeline.progress_ratio() == 1.0

    def test_end_when_not_playing_is_ignored(self, timeline):
        timeline.end()

        assert timeline.state is TimelineState.READY

    def test_seek_after_end_pauses_at_target(self, timeline):
        timeline.play()
        timeline.end()

        timeline.seek(10.0)

        assert timeline.state is TimelineState.PAUSED
        assert timeline.current_seconds == 10.0

    def test_play_after_end_restarts(self, timeline):
        timeline.play()
        timeline.end()

        assert timeline.play()
        assert timeline.current_seconds == 0.0
        assert timeline.state is TimelineState.PLAYING

    def test_tick_updates_and_clamps(self, timeline):
        timeline.play()

        timeline.tick(12.5)
        assert timeline.current_seconds == 12.5
        assert timeline.progress_ratio() == pytest.approx(12.5 / 120.0)

        timeline.tick(130.0)
        assert timeline.current_seconds == 120.0

        timeline.tick(-1.0)
        assert timeline.current_seconds == 0.0

    def test_load_discards_previous_position(self, timeline):
        timeline.play()
        timeline.tick(60.0)

        timeline.load(30.0)

        assert timeline.position == TimelinePosition(0.0, 30.0, TimelineState.READY)

    def test_unload(self, timeline):
        timeline.play()

        timeline.unload()

        assert timeline.position == TimelinePosition(0.0, 0.0, TimelineState.IDLE)

    def test_position_invariant(self, timeline):
        timeline.play()
        for target in [-10, 0, 50, 119.999, 120, 1e9, float('nan')]:
            timeline.seek(target)
            position = timeline.position
            assert 0.0 <= position.current_seconds <= position.duration_seconds


class TestFormatTime:
    """Test cases for format_time()."""

    @pytest.mark.parametrize("seconds,expected", [
        (0, "0:00"),
        (5.9, "0:05"),
        (65, "1:05"),
        (600, "10:00"),
        (-3, "0:00"),
        (float('nan'), "0:00"),
    ])
    def test_format(self, seconds, expected):
        assert format_time(seconds) == expected
