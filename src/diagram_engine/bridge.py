"""
Export bridge: read the live document from the editor under a deadline.

The bridge owns a single pending-export slot. A request installs itself in
the slot, asks the editor to export and waits for whichever comes first: the
export-complete event or the deadline. A request that times out leaves the
slot invalidated, so an export arriving late is dropped instead of being
handed to the next, unrelated request.
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass
from enum import Enum

from diagram_engine.config import DEFAULT_EXPORT_TIMEOUT
from diagram_engine.document import format_xml
from diagram_engine.editor.base import EditorPort
from diagram_engine.errors import ExportInProgressError, ExportTimeoutError
from diagram_engine.events import EXPORT_TIMED_OUT, EventBus, ExportTimedOutEvent
from diagram_engine.logging import get_logger

logger = get_logger("bridge")


class ExportState(str, Enum):
    """State tag of the pending-export slot."""

    IDLE = "idle"
    AWAITING = "awaiting"


@dataclass
class _PendingExport:
    request_id: str
    future: asyncio.Future[str]
    deadline: float  # loop.time() at which the request expires
    triggers: int = 1  # export requests sent to the editor for this slot


class ExportBridge:
    """
    Retrieve one document snapshot at a time from an editor port.

    Usage:
        bridge = ExportBridge(editor, timeout=10.0)
        document = await bridge.request_snapshot()
    """

    def __init__(
        self,
        editor: EditorPort,
        timeout: float = DEFAULT_EXPORT_TIMEOUT,
        *,
        format_exports: bool = False,
        events: EventBus | None = None,
    ) -> None:
        self.editor = editor
        self.timeout = timeout
        self.format_exports = format_exports
        self.events = events or EventBus()
        self.last_snapshot: str | None = None
        self.dropped_exports = 0

        self._pending: _PendingExport | None = None
        self._ids = itertools.count(1)
        # Timed-out requests whose answer may still arrive without an id.
        self._stale_uncorrelated = 0
        self._retriggers: set[asyncio.Task[None]] = set()

        editor.set_export_handler(self._on_export_complete)

    @property
    def state(self) -> ExportState:
        return ExportState.IDLE if self._pending is None else ExportState.AWAITING

    @property
    def deadline(self) -> float | None:
        """Loop time at which the pending request expires, if any."""
        return None if self._pending is None else self._pending.deadline

    async def request_snapshot(self, timeout: float | None = None) -> str:
        """
        Export the live document from the editor.

        Args:
            timeout: Seconds to wait; defaults to the bridge timeout.

        Raises:
            ExportInProgressError: another request has not resolved yet.
            ExportTimeoutError: the editor did not answer in time.
        """
        if self._pending is not None:
            raise ExportInProgressError()

        timeout = self.timeout if timeout is None else timeout
        loop = asyncio.get_running_loop()
        pending = _PendingExport(
            request_id=f"export-{next(self._ids)}",
            future=loop.create_future(),
            deadline=loop.time() + timeout,
        )
        self._pending = pending
        logger.debug("Export %s requested (timeout=%.1fs)", pending.request_id, timeout)

        try:
            await self.editor.trigger_export(pending.request_id)
            remaining = max(pending.deadline - loop.time(), 0.0)
            document = await asyncio.wait_for(pending.future, timeout=remaining)
        except asyncio.TimeoutError:
            # Each export request sent for this slot may still be answered.
            self._stale_uncorrelated += pending.triggers
            logger.warning("Export %s timed out after %.1fs", pending.request_id, timeout)
            await self.events.emit(
                EXPORT_TIMED_OUT,
                ExportTimedOutEvent(request_id=pending.request_id, timeout=timeout),
            )
            raise ExportTimeoutError(timeout) from None
        finally:
            if self._pending is pending:
                self._pending = None

        if self.format_exports:
            document = format_xml(document)
        self.last_snapshot = document
        logger.debug("Export %s completed (%d chars)", pending.request_id, len(document))
        return document

    def _on_export_complete(self, document: str, request_id: str | None = None) -> None:
        pending = self._pending

        if request_id is None and self._stale_uncorrelated > 0:
            # Cannot tell this answer apart from one owed to an expired request.
            self._stale_uncorrelated -= 1
            self._drop(request_id, "possibly answering an expired request")
            if pending is not None and not pending.future.done():
                self._retrigger(pending)
            return
        if pending is None or pending.future.done():
            self._drop(request_id, "no request pending")
            return
        if request_id is not None and request_id != pending.request_id:
            self._drop(request_id, f"pending request is {pending.request_id}")
            return

        pending.future.set_result(document)

    def _retrigger(self, pending: _PendingExport) -> None:
        """Ask again for the live request; its first answer may have been dropped."""
        pending.triggers += 1
        logger.debug("Re-requesting export %s", pending.request_id)
        task = asyncio.get_running_loop().create_task(
            self.editor.trigger_export(pending.request_id)
        )
        self._retriggers.add(task)
        task.add_done_callback(self._retriggers.discard)

    def _drop(self, request_id: str | None, why: str) -> None:
        self.dropped_exports += 1
        logger.warning("Dropped export event (request_id=%s): %s", request_id, why)
