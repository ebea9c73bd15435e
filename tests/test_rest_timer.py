"""Tests for the absolute-expiry rest timer."""

import pytest

from aesthetic_progression.core.rest_timer import RestTimer, now_ms, remaining_seconds

from conftest import FakeClock


class TestRemainingSeconds:
    @pytest.mark.parametrize(
        "end_ms, now_s, expected",
        [
            (90_000, 0.0, 90),
            (90_000, 30.0, 60),
            (90_000, 30.4, 60),  # 59.6 s rounds up
            (90_000, 30.5, 60),  # half rounds up
            (90_000, 30.6, 59),
            (90_000, 89.6, 0),
            (90_000, 95.0, 0),  # never negative
        ],
    )
    def test_rounding(self, end_ms, now_s, expected):
        assert remaining_seconds(end_ms, now_s) == expected


class TestRestTimer:
    def test_idle_timer(self):
        timer = RestTimer(FakeClock(0.0))
        assert not timer.is_running
        assert timer.remaining() is None
        assert timer.poll() is None

    def test_counts_down_from_clock(self):
        clock = FakeClock(100.0)
        timer = RestTimer(clock)
        timer.arm(now_ms(clock) + 60_000)
        assert timer.poll() == 60
        clock.advance(45)
        assert timer.poll() == 15
        assert timer.is_running

    def test_disarms_at_zero(self):
        clock = FakeClock(100.0)
        timer = RestTimer(clock)
        timer.arm(now_ms(clock) + 5_000)
        clock.advance(10)
        assert timer.poll() == 0
        assert not timer.is_running
        assert timer.poll() is None

    def test_rearm_invalidates_previous_token(self):
        clock = FakeClock(0.0)
        timer = RestTimer(clock)
        first = timer.arm(90_000)
        second = timer.arm(60_000)
        assert first.cancelled
        assert timer.poll(first) is None
        assert timer.poll(second) == 60

    def test_cancel(self):
        timer = RestTimer(FakeClock(0.0))
        token = timer.arm(30_000)
        timer.cancel()
        assert token.cancelled
        assert timer.poll(token) is None
        assert timer.remaining() is None

    def test_countdown_ticks_until_zero(self):
        clock = FakeClock(0.0)
        timer = RestTimer(clock)
        timer.arm(3_000)
        ticks = []

        finished = timer.countdown(ticks.append, sleep=clock.advance, interval=1.0)

        assert finished is True
        assert ticks == [3, 2, 1, 0]
        assert not timer.is_running

    def test_countdown_stops_when_cancelled(self):
        clock = FakeClock(0.0)
        timer = RestTimer(clock)
        timer.arm(10_000)
        ticks = []

        def sleep(seconds):
            clock.advance(seconds)
            if len(ticks) == 2:
                timer.cancel()

        assert timer.countdown(ticks.append, sleep=sleep) is False
        assert ticks == [10, 9]

    def test_countdown_without_rest(self):
        timer = RestTimer(FakeClock(0.0))
        assert timer.countdown(lambda left: None) is False
