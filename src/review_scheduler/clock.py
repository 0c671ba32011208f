"""Clock capabilities supplying "now" in epoch milliseconds."""
import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float: ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> float:
        return time.time() * 1000


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, now_ms: float = 0):
        self._now = now_ms

    def now(self) -> float:
        return self._now

    def set(self, now_ms: float) -> None:
        self._now = now_ms

    def advance(self, ms: float) -> float:
        self._now += ms
        return self._now
