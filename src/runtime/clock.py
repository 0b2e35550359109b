"""
Clock sources for the tracker.

The tracker never reads wall-clock time directly; it asks an injected clock
for monotonic milliseconds. Tests and replays use ``ManualClock``.
"""

from __future__ import annotations

import threading
import time
from typing import Protocol


class Clock(Protocol):
    def now_ms(self) -> float:
        ...


class MonotonicClock:
    """Process-local monotonic clock in milliseconds."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)
        self._lock = threading.Lock()

    def now_ms(self) -> float:
        with self._lock:
            return self._now

    def advance(self, ms: float) -> float:
        with self._lock:
            self._now += ms
            return self._now

    def set(self, ms: float) -> None:
        # Going backwards is allowed so clock regression can be exercised.
        with self._lock:
            self._now = float(ms)
