"""Tests for the once-per-interval countdown ticker."""
import asyncio
from datetime import timedelta

import pytest

from countdown.services.ticker import CountdownTicker
from tests.conftest import NOW


class FakeClock:
    """Clock that only advances when the ticker sleeps."""

    def __init__(self, start):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += timedelta(seconds=seconds)


def _collect(ticker, limit=100):
    async def run():
        out = []
        async for remaining in ticker.ticks():
            out.append(remaining)
            if len(out) >= limit:
                ticker.stop()
        return out
    return asyncio.run(run())


class TestCountdownTicker:

    def test_counts_down_until_passed(self):
        clock = FakeClock(NOW)
        ticker = CountdownTicker(NOW + timedelta(seconds=3), interval=1.0, clock=clock, sleep=clock.sleep)
        ticks = _collect(ticker)
        assert [t.format() for t in ticks] == ["00:00:03", "00:00:02", "00:00:01", "Event has passed"]
        assert clock.sleeps == [1.0, 1.0, 1.0]
        assert ticker.stopped

    def test_emits_immediately(self):
        clock = FakeClock(NOW)
        ticker = CountdownTicker(NOW + timedelta(days=30), clock=clock, sleep=clock.sleep)
        ticks = _collect(ticker, limit=1)
        assert ticks[0].format() == "30d 00h 00m"
        assert clock.sleeps == []
        assert ticker.last_checked_at == NOW

    def test_stop_halts_ticks(self):
        clock = FakeClock(NOW)
        ticker = CountdownTicker(NOW + timedelta(days=1), clock=clock, sleep=clock.sleep)
        ticks = _collect(ticker, limit=5)
        assert len(ticks) == 5
        assert ticks[-1].seconds == 56

    def test_past_target_yields_once(self):
        clock = FakeClock(NOW)
        ticker = CountdownTicker(NOW - timedelta(minutes=1), clock=clock, sleep=clock.sleep)
        ticks = _collect(ticker)
        assert len(ticks) == 1
        assert ticks[0].is_past

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            CountdownTicker(NOW, interval=0)
