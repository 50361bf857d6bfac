"""Error handling utilities for lightsync.

Provides structured error types so that failures crossing the host boundary
(initialization, device commands) are reported in a consistent shape.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of errors for appropriate handling."""

    TIMEOUT = "timeout"
    DEVICE_OFFLINE = "device_offline"
    DEVICE_NOT_FOUND = "device_not_found"
    INITIALIZATION = "initialization"
    INVALID_INPUT = "invalid_input"
    TRANSPORT = "transport"
    INTERNAL_ERROR = "internal_error"


@dataclass
class LightError:
    """Structured error detail attached to error events."""

    category: ErrorCategory
    message: str
    device_id: str | None = None
    recovery: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to detail dict."""
        result: dict[str, Any] = {
            "error": self.message,
            "error_category": self.category.value,
        }
        if self.device_id:
            result["device_id"] = self.device_id
        if self.recovery:
            result["recovery"] = self.recovery
        if self.details:
            result["details"] = self.details
        return result


RECOVERY_SUGGESTIONS = {
    ErrorCategory.TIMEOUT: "Device may be unresponsive. Check network connectivity.",
    ErrorCategory.DEVICE_OFFLINE: "Device is offline. Check power and network connection.",
    ErrorCategory.DEVICE_NOT_FOUND: "Light has not been discovered or was removed.",
    ErrorCategory.INITIALIZATION: "Light will be initialized again when it is rediscovered.",
    ErrorCategory.INVALID_INPUT: "Check payload keys and values.",
    ErrorCategory.TRANSPORT: "Device rejected or dropped the request.",
    ErrorCategory.INTERNAL_ERROR: "An unexpected error occurred.",
}


def get_recovery_suggestion(category: ErrorCategory) -> str:
    """Get recovery suggestion for an error category."""
    return RECOVERY_SUGGESTIONS.get(category, "Please try again.")


class LightsyncError(Exception):
    """Base class for lightsync errors."""


class InvalidColorError(LightsyncError, ValueError):
    """Raised when a color string cannot be parsed."""


class LightNotFoundError(LightsyncError):
    """Raised when a light is not registered."""

    def __init__(self, device_id: str):
        self.device_id = device_id
        super().__init__(f"Light {device_id} not found")


class InitializationError(LightsyncError):
    """Raised when a light could not complete its initialization queries."""

    def __init__(self, device_id: str, cause: BaseException):
        self.device_id = device_id
        self.cause = cause
        super().__init__(f"Failed to initialize light {device_id}: {cause}")


class DeviceTimeoutError(LightsyncError):
    """Raised when a device operation times out."""

    def __init__(self, device_id: str, operation: str, timeout: float):
        self.device_id = device_id
        self.operation = operation
        self.timeout = timeout
        super().__init__(
            f"Device {device_id} timed out during {operation} after {timeout}s"
        )


def classify_exception(e: BaseException, device_id: str | None = None) -> LightError:
    """Classify an exception into a structured error.

    Args:
        e: The exception to classify
        device_id: Optional device ID for context

    Returns:
        LightError with appropriate category and recovery suggestion
    """
    if isinstance(e, InitializationError):
        category = ErrorCategory.INITIALIZATION
        message = str(e)
        device_id = e.device_id
        cause = classify_exception(e.cause, device_id)
        return LightError(
            category=category,
            message=message,
            device_id=device_id,
            recovery=get_recovery_suggestion(category),
            details={"cause": cause.category.value},
        )

    if isinstance(e, DeviceTimeoutError):
        category = ErrorCategory.TIMEOUT
        message = str(e)
        device_id = e.device_id
    elif isinstance(e, asyncio.TimeoutError):
        category = ErrorCategory.TIMEOUT
        message = "Operation timed out"
        if device_id:
            message = f"Device {device_id} operation timed out"
    elif isinstance(e, LightNotFoundError):
        category = ErrorCategory.DEVICE_NOT_FOUND
        message = str(e)
        device_id = e.device_id
    elif isinstance(e, ValueError):
        category = ErrorCategory.INVALID_INPUT
        message = str(e)
    elif isinstance(e, (ConnectionError, OSError)):
        category = ErrorCategory.TRANSPORT
        message = f"Connection error: {e}"
    else:
        category = ErrorCategory.INTERNAL_ERROR
        message = f"Unexpected error: {e}"

    return LightError(
        category=category,
        message=message,
        device_id=device_id,
        recovery=get_recovery_suggestion(category),
    )


DEFAULT_DEVICE_TIMEOUT = 10.0  # Time for individual device operations


async def execute_with_timeout(
    coro: Any,
    timeout: float = DEFAULT_DEVICE_TIMEOUT,
    device_id: str | None = None,
    operation: str = "operation",
) -> Any:
    """Execute a coroutine with a timeout.

    Args:
        coro: Coroutine to execute
        timeout: Timeout in seconds
        device_id: Optional device ID for error context
        operation: Operation name for error messages

    Returns:
        Result of the coroutine

    Raises:
        DeviceTimeoutError: If the operation times out
    """
    try:
        async with asyncio.timeout(timeout):
            return await coro
    except asyncio.TimeoutError:
        if device_id:
            raise DeviceTimeoutError(device_id, operation, timeout)
        raise
