"""Time sources. Controllers take a clock so tests can drive them without waiting."""
from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float: ...


class MonotonicClock:
    def now(self) -> float:
        return time.monotonic()


class VirtualClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError("A clock cannot run backwards.")
        self._now += seconds
        return self._now

    def set(self, moment: float) -> float:
        if moment < self._now:
            raise ValueError("A clock cannot run backwards.")
        self._now = moment
        return self._now
