"""Tests for signless.clock."""
from __future__ import annotations

import time

import pytest

from signless.clock import ManualClock, SystemClock


class TestSystemClock:
    def test_returns_whole_seconds(self) -> None:
        now = SystemClock().now()
        assert isinstance(now, int)
        assert abs(now - int(time.time())) <= 1


class TestManualClock:
    def test_starts_at_given_time(self) -> None:
        assert ManualClock(start=1_000).now() == 1_000

    def test_defaults_to_wall_clock(self) -> None:
        assert abs(ManualClock().now() - int(time.time())) <= 1

    def test_advance(self) -> None:
        clock = ManualClock(start=1_000)
        assert clock.advance(60) == 1_060
        assert clock.now() == 1_060

    def test_set(self) -> None:
        clock = ManualClock(start=1_000)
        clock.set(5_000)
        assert clock.now() == 5_000

    def test_cannot_move_backwards(self) -> None:
        clock = ManualClock(start=1_000)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            clock.set(999)
        assert clock.now() == 1_000
