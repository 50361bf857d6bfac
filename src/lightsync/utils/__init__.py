"""Utility modules for lightsync."""

from lightsync.utils.clock import Clock, MonotonicClock
from lightsync.utils.errors import (
    DeviceTimeoutError,
    ErrorCategory,
    InitializationError,
    InvalidColorError,
    LightError,
    LightNotFoundError,
    LightsyncError,
    classify_exception,
    execute_with_timeout,
)
from lightsync.utils.health import PollHealth

__all__ = [
    "Clock",
    "DeviceTimeoutError",
    "ErrorCategory",
    "InitializationError",
    "InvalidColorError",
    "LightError",
    "LightNotFoundError",
    "LightsyncError",
    "MonotonicClock",
    "PollHealth",
    "classify_exception",
    "execute_with_timeout",
]
