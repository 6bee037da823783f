"""
Best-effort event sink for off-system indexers.

Events are observability only: a failing subscriber is logged and skipped,
never allowed to fail the operation that emitted the event.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """
    A notification emitted by a completed operation.
    """
    name: str
    timestamp: int
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class EventLog:
    """
    Records emitted events and forwards them to subscribers.
    """
    events: list[Event] = field(default_factory=list)
    subscribers: list[Callable[[Event], None]] = field(default_factory=list)

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        self.subscribers.append(callback)

    def emit(self, name: str, timestamp: int, **fields: Any) -> Event:
        event = Event(name=name, timestamp=timestamp, fields=fields)
        self.events.append(event)
        for callback in self.subscribers:
            try:
                callback(event)
            except Exception as e:
                logger.warning(f"Event subscriber failed on {name}: {e}")
        return event

    def named(self, name: str) -> list[Event]:
        return [e for e in self.events if e.name == name]
