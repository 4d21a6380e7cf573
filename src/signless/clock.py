"""Chain-time sources.

The engine reads the current time through a clock object so that expiry
can be checked against block time in production and moved freely in tests.
"""
from __future__ import annotations

import threading
import time


class SystemClock:
    """Wall-clock time in whole Unix seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """A clock that only moves when told to.

    Parameters
    ----------
    start:
        Initial timestamp. Defaults to the current wall-clock time.
    """

    def __init__(self, start: int | None = None) -> None:
        self._now = int(time.time()) if start is None else start
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            return self._now

    def advance(self, seconds: int) -> int:
        """Move forward by *seconds* and return the new time."""
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards.")
        with self._lock:
            self._now += seconds
            return self._now

    def set(self, timestamp: int) -> None:
        """Jump to *timestamp*; it may not be earlier than the current time."""
        with self._lock:
            if timestamp < self._now:
                raise ValueError("ManualClock cannot move backwards.")
            self._now = timestamp
