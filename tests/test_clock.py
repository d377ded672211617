"""Unit tests for the playback clock."""

from datetime import datetime, timedelta, timezone

import pytest

from skydome.clock import PLAYBACK_SPEEDS, PlaybackClock

START = datetime(2024, 8, 12, 6, 30, tzinfo=timezone.utc)


class TestTick:
    def test_realtime_follows_wall_clock(self):
        clock = PlaybackClock(instant=START)
        wall = START + timedelta(minutes=5)
        assert clock.tick(0.016, wall_clock=wall) == wall
        assert clock.instant == wall

    def test_playback_advances_by_speed(self):
        clock = PlaybackClock(instant=START, speed=60, realtime=False)
        clock.tick(0.5)
        assert clock.instant == START + timedelta(seconds=30)

    def test_reverse_goes_back(self):
        clock = PlaybackClock(instant=START, speed=-3600, realtime=False)
        clock.tick(2.0)
        assert clock.instant == START - timedelta(hours=2)

    def test_paused_ignores_wall_clock(self):
        clock = PlaybackClock(instant=START, speed=0, realtime=False)
        assert clock.tick(10.0, wall_clock=START + timedelta(days=1)) == START

    def test_set_instant_leaves_realtime(self):
        clock = PlaybackClock(instant=START)
        target = datetime(1969, 7, 20, 20, 17, tzinfo=timezone.utc)
        clock.set_instant(target)
        assert not clock.realtime
        assert clock.tick(1.0) == target + timedelta(seconds=1)


class TestSpeedControls:
    def test_forward_steps_up_and_stops_at_max(self):
        clock = PlaybackClock(instant=START, speed=1, realtime=False)
        seen = []
        for _ in range(6):
            clock.forward()
            seen.append(clock.speed)
        assert seen == [10, 60, 600, 3600, 3600, 3600]

    def test_forward_flips_reverse(self):
        clock = PlaybackClock(instant=START, speed=-600, realtime=False)
        clock.forward()
        assert clock.speed == 600

    def test_forward_from_pause(self):
        clock = PlaybackClock(instant=START)
        clock.pause()
        assert clock.speed == 0 and not clock.realtime
        clock.forward()
        assert clock.speed == 1

    def test_forward_leaves_realtime(self):
        clock = PlaybackClock(instant=START)
        clock.forward()
        assert not clock.realtime
        assert clock.speed == 10

    def test_reverse_mirrors_forward(self):
        clock = PlaybackClock(instant=START, speed=10, realtime=False)
        clock.reverse()
        assert clock.speed == -10
        clock.reverse()
        assert clock.speed == -60
        for _ in range(5):
            clock.reverse()
        assert clock.speed == PLAYBACK_SPEEDS[0]

    def test_reverse_from_pause(self):
        clock = PlaybackClock(instant=START, speed=0, realtime=False)
        clock.reverse()
        assert clock.speed == -1

    @pytest.mark.parametrize(
        "speed, label", [(0, "PAUSED"), (60, "1m/s"), (-3600, "-1h/s"), (7, "7x")]
    )
    def test_speed_label(self, speed, label):
        assert PlaybackClock(instant=START, speed=speed).speed_label == label
