"""Event fan-out from lights to the host."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Kinds of events published to the host."""

    NEW = "new"
    CHANGE = "change"
    UPDATE = "update"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class LightEvent:
    """An event about a light.

    State events (new/change/update) carry ``message``, the host state
    message. Warning and error events carry ``text`` and optional ``detail``.
    """

    kind: EventKind
    light_id: str | None = None
    message: dict[str, Any] | None = None
    text: str | None = None
    detail: Any = None

    def to_dict(self) -> dict[str, Any]:
        if self.message is not None:
            return {"event": self.kind.value, **self.message}
        result: dict[str, Any] = {"event": self.kind.value, "message": self.text}
        if self.light_id:
            result["id"] = self.light_id
        if self.detail is not None:
            result["detail"] = self.detail
        return result


Observer = Callable[[LightEvent], Any]


class EventFanout:
    """Explicit observer list.

    Observers are called synchronously in subscription order. An observer that
    raises is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._observers: list[Observer] = []

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Add an observer. Returns a callable that removes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def publish(self, event: LightEvent) -> None:
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception(f"Observer failed handling {event.kind.value} event")

    def clear(self) -> None:
        self._observers.clear()

    def __len__(self) -> int:
        return len(self._observers)
