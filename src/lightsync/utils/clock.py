"""Clock abstraction used for echo suppression windows."""

import time
from typing import Protocol


class Clock(Protocol):
    """Source of monotonic time in seconds."""

    def now(self) -> float: ...


class MonotonicClock:
    """Clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()
