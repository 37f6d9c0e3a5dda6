"""Wall-clock access and delays, injectable so tests never really sleep."""

import time
from typing import Protocol


class Clock(Protocol):
    """Source of time and blocking delays."""

    def now(self) -> float:
        """Seconds since the epoch."""
        ...

    def sleep(self, seconds: float) -> None:
        """Block for the given number of seconds."""
        ...


class SystemClock:
    """Clock backed by the time module."""

    def now(self) -> float:
        return time.time()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


class VirtualClock:
    """Clock whose sleeps advance virtual time instantly.

    Args:
        start: Initial epoch time
    """

    def __init__(self, start: float = 1_700_000_000.0):
        self._now = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self._now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._now += seconds

    def advance(self, seconds: float) -> None:
        """Move time forward without recording a sleep."""
        self._now += seconds
