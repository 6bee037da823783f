"""Clock sources for lifecycle guards. Times are integer seconds."""

import time
from dataclasses import dataclass
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        ...


class SystemClock:
    """Wall-clock time, truncated to whole seconds."""

    def now(self) -> int:
        return int(time.time())


@dataclass
class ManualClock:
    """
    A clock that only moves when told to.

    Used by tests and simulations to step through lifecycle windows. Time
    never goes backwards.
    """
    current: int = 0

    def now(self) -> int:
        return self.current

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self.current += seconds
        return self.current

    def set(self, timestamp: int) -> int:
        if timestamp < self.current:
            raise ValueError("Clock cannot move backwards")
        self.current = timestamp
        return self.current
