"""Poll health tracking for lights.

Poll failures never change reachability, so this is bookkeeping only: it lets
a host see which lights have stopped answering polls.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

UNHEALTHY_THRESHOLD = 3


@dataclass
class PollHealth:
    """Poll statistics for a light."""

    device_id: str
    last_successful_poll: datetime | None = None
    last_failed_poll: datetime | None = None
    last_error: str | None = None
    consecutive_failures: int = 0
    total_failures: int = 0
    total_successes: int = 0

    def record_success(self) -> None:
        """Record a successful poll."""
        self.last_successful_poll = datetime.now()
        self.consecutive_failures = 0
        self.total_successes += 1

    def record_failure(self, error: BaseException | None = None) -> None:
        """Record a failed poll."""
        self.last_failed_poll = datetime.now()
        self.consecutive_failures += 1
        self.total_failures += 1
        if error is not None:
            self.last_error = str(error) or type(error).__name__

    @property
    def is_healthy(self) -> bool:
        return self.consecutive_failures < UNHEALTHY_THRESHOLD

    @property
    def failure_rate(self) -> float:
        """Get the overall failure rate."""
        total = self.total_failures + self.total_successes
        if total == 0:
            return 0.0
        return self.total_failures / total

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "is_healthy": self.is_healthy,
            "consecutive_failures": self.consecutive_failures,
            "failure_rate": round(self.failure_rate, 3),
        }
        if self.last_successful_poll:
            result["last_success"] = self.last_successful_poll.isoformat()
        if self.last_error:
            result["last_error"] = self.last_error
        return result
