"""
Lifecycle events of the diagram engine.

The loader, the export bridge and the tool dispatcher announce what they did
on an EventBus. Subscribers observe; they cannot change an outcome, and a
subscriber that raises is logged and skipped.

Example:
    from diagram_engine.events import EventBus, TOOL_CALL_REPORTED

    bus = EventBus()

    @bus.on(TOOL_CALL_REPORTED)
    async def audit(event):
        print(event.tool_call_id, event.state)
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from diagram_engine.logging import get_logger

logger = get_logger("events")

DIAGRAM_LOADED = "diagram_loaded"
HISTORY_RESTORED = "history_restored"
DIAGRAM_CLEARED = "diagram_cleared"
EXPORT_TIMED_OUT = "export_timed_out"
TOOL_CALL_RECEIVED = "tool_call_received"
TOOL_CALL_REPORTED = "tool_call_reported"


@dataclass
class DiagramLoadedEvent:
    """A document became visible and was appended to history."""

    index: int
    source: str  # "display", "edit", "manual"
    length: int


@dataclass
class HistoryRestoredEvent:
    index: int
    previous_index: int | None


@dataclass
class DiagramClearedEvent:
    discarded: int  # snapshots dropped


@dataclass
class ExportTimedOutEvent:
    request_id: str
    timeout: float


@dataclass
class ToolCallReceivedEvent:
    """A raw tool call entered the dispatcher (before validation)."""

    tool_call_id: str
    tool_name: str
    arguments: Any


@dataclass
class ToolCallReportedEvent:
    """Exactly one per tool call, after its result was produced."""

    tool_call_id: str
    tool_name: str
    state: str  # "succeeded" or "failed"
    content: str
    reason: str | None = None


# Sync or async callable taking the event object.
EventHandler = Callable[[Any], Any]


class EventBus:
    """
    Name-keyed publish/subscribe for engine events.

    Handlers of one event run in ascending ``priority``, then in
    subscription order.

    Usage:
        bus = EventBus()
        unsubscribe = bus.on(DIAGRAM_LOADED, lambda e: print(e.index))
        await bus.emit(DIAGRAM_LOADED, DiagramLoadedEvent(0, "display", 120))
        unsubscribe()
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[tuple[int, EventHandler]]] = {}

    def on(
        self,
        event: str,
        handler: EventHandler | None = None,
        priority: int = 0,
    ) -> Any:
        """
        Subscribe ``handler`` to ``event``.

        Called with a handler it returns an unsubscribe function; called
        without one it acts as a decorator and returns the function.
        """
        if handler is None:

            def decorator(fn: EventHandler) -> EventHandler:
                self.on(event, fn, priority)
                return fn

            return decorator

        entry = (priority, handler)
        handlers = self._subscribers.setdefault(event, [])
        handlers.append(entry)
        handlers.sort(key=lambda item: item[0])

        def unsubscribe() -> None:
            if entry in self._subscribers.get(event, []):
                self._subscribers[event].remove(entry)

        return unsubscribe

    def off(self, event: str, handler: EventHandler) -> None:
        """Remove every subscription of ``handler`` to ``event``."""
        self._subscribers[event] = [
            entry for entry in self._subscribers.get(event, []) if entry[1] is not handler
        ]

    def clear(self, event: str | None = None) -> None:
        if event is None:
            self._subscribers.clear()
        else:
            self._subscribers.pop(event, None)

    def has_handlers(self, event: str) -> bool:
        return bool(self._subscribers.get(event))

    @property
    def handler_count(self) -> int:
        return sum(len(handlers) for handlers in self._subscribers.values())

    async def emit(self, event: str, data: Any = None) -> list[Any]:
        """
        Deliver ``data`` to every handler of ``event``.

        Returns:
            Non-None handler return values, in call order
        """
        results: list[Any] = []
        for _, handler in list(self._subscribers.get(event, [])):
            try:
                result = handler(data)
                if asyncio.iscoroutine(result) or asyncio.isfuture(result):
                    result = await result
            except Exception as e:
                logger.warning("Handler for %s failed: %s", event, e)
                continue
            if result is not None:
                results.append(result)
        return results
