"""Publish/subscribe bus for one editor session.

Collaborators (toasts, dialogs, canvas) subscribe when they mount and
unsubscribe when they unmount. Nothing is registered globally.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Types of events published by the editor."""

    notice = "notice"
    graph_loaded = "graph_loaded"
    graph_saved = "graph_saved"
    edit_requested = "edit_requested"
    edges_marked = "edges_marked"
    edges_removed = "edges_removed"
    selection_changed = "selection_changed"


class NoticeLevel(str, Enum):
    info = "info"
    success = "success"
    error = "error"


@dataclass(frozen=True)
class Notice:
    """A short user-visible message."""

    level: NoticeLevel
    message: str


@dataclass
class Event:
    type: EventType
    data: dict[str, Any] = field(default_factory=dict)


Subscriber = Callable[[Event], None]


class EventBus:
    """Synchronous event bus; subscribers run in subscription order."""

    def __init__(self) -> None:
        self._subscribers: dict[EventType, list[Subscriber]] = {}

    def subscribe(self, event_type: EventType, callback: Subscriber) -> None:
        """Register a callback for an event type."""
        self._subscribers.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: EventType, callback: Subscriber) -> None:
        """Remove a callback. Unknown callbacks are ignored."""
        callbacks = self._subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def clear(self) -> None:
        self._subscribers.clear()

    def subscriber_count(self, event_type: EventType) -> int:
        return len(self._subscribers.get(event_type, []))

    def publish(self, event: Event) -> None:
        # copy so callbacks may unsubscribe themselves
        for callback in list(self._subscribers.get(event.type, [])):
            try:
                callback(event)
            except Exception:
                logger.exception("subscriber failed for %s event", event.type.value)

    def notify(self, level: NoticeLevel, message: str) -> None:
        """Publish a user-visible notice."""
        self.publish(Event(EventType.notice, {"notice": Notice(level, message)}))
