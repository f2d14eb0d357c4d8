from __future__ import annotations

import threading
from typing import Any, Callable

LOADED = "loaded"
STATE_CHANGED = "state_changed"
TIME_UPDATE = "time_update"
CURSOR_MOVED = "cursor_moved"
SELECTION_CHANGED = "selection_changed"
ZOOM_CHANGED = "zoom_changed"
ERROR = "error"


class Subscription:
    """Handle returned by EventBus.subscribe; cancel() detaches the handler."""

    def __init__(self, bus: "EventBus", event_type: str, handler: Callable[..., Any]) -> None:
        self._bus = bus
        self.event_type = event_type
        self.handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._bus.unsubscribe(self.event_type, self.handler)


class EventBus:
    """Lightweight publish/subscribe bus for timeline events.

    Handlers are called synchronously, in subscription order, on the thread
    that calls emit(). The lock only guards the handler table.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, handler: Callable[..., Any]) -> Subscription:
        """Register a handler for an event type."""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        return Subscription(self, event_type, handler)

    def unsubscribe(self, event_type: str, handler: Callable[..., Any]) -> None:
        """Remove a handler."""
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def handler_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._handlers.get(event_type, []))

    def emit(self, event_type: str, **data: Any) -> None:
        """Fire all handlers for an event type."""
        with self._lock:
            handlers = list(self._handlers.get(event_type, []))
        for handler in handlers:
            handler(**data)
