"""Diagram loader: make a document visible and record it in history."""
from __future__ import annotations

from diagram_engine.document import EMPTY_DIAGRAM, is_root_fragment, replace_root
from diagram_engine.editor.base import EditorPort
from diagram_engine.events import (
    DIAGRAM_CLEARED,
    DIAGRAM_LOADED,
    HISTORY_RESTORED,
    DiagramClearedEvent,
    DiagramLoadedEvent,
    EventBus,
    HistoryRestoredEvent,
)
from diagram_engine.history import DiagramHistory
from diagram_engine.logging import get_logger
from diagram_engine.models import DiagramSnapshot, SnapshotSource

logger = get_logger("loader")


class DiagramLoader:
    """Owns the visible document and the snapshot history.

    A document only enters the history after the editor accepted it. When
    the editor raises ``LoadFailureError`` the history is left as it was and
    the error propagates to the caller.
    """

    def __init__(
        self,
        editor: EditorPort,
        history: DiagramHistory | None = None,
        *,
        events: EventBus | None = None,
        wrap_root_fragments: bool = True,
    ) -> None:
        self.editor = editor
        self.history = history if history is not None else DiagramHistory()
        self.events = events or EventBus()
        self.wrap_root_fragments = wrap_root_fragments
        self._last_known: str | None = None

    @property
    def visible_document(self) -> str:
        """The document at the history pointer, or the blank canvas."""
        current = self.history.current
        return current.document if current is not None else EMPTY_DIAGRAM

    @property
    def last_known_document(self) -> str:
        """Most recent document loaded into or exported from the editor."""
        if self._last_known is not None:
            return self._last_known
        return self.visible_document

    def observe(self, document: str) -> None:
        """Record a document the editor just exported."""
        self._last_known = document

    async def load(
        self, document: str, source: SnapshotSource = SnapshotSource.MANUAL
    ) -> DiagramSnapshot:
        """Replace the visible document and append it to history."""
        if self.wrap_root_fragments and is_root_fragment(document):
            document = replace_root(self.last_known_document, document)

        await self.editor.replace_visible_document(document)
        snapshot = self.history.append(document, source)
        self._last_known = document
        logger.debug(
            "Loaded snapshot #%d from %s (%d chars)",
            snapshot.index,
            source.value,
            len(document),
        )
        await self.events.emit(
            DIAGRAM_LOADED,
            DiagramLoadedEvent(index=snapshot.index, source=source.value, length=len(document)),
        )
        return snapshot

    async def restore(self, position: int) -> DiagramSnapshot:
        """Show the snapshot at ``position`` and move the pointer there."""
        snapshot = self.history[position]
        previous = self.history.position
        await self.editor.replace_visible_document(snapshot.document)
        self.history.move_to(position)
        self._last_known = snapshot.document
        logger.debug("Restored snapshot #%d (was #%s)", position, previous)
        await self.events.emit(
            HISTORY_RESTORED,
            HistoryRestoredEvent(index=position, previous_index=previous),
        )
        return snapshot

    async def clear(self) -> None:
        """Empty the history and reset the editor to the blank canvas."""
        await self.editor.replace_visible_document(EMPTY_DIAGRAM)
        discarded = self.history.clear()
        self._last_known = None
        logger.debug("Cleared history (%d snapshot(s) discarded)", discarded)
        await self.events.emit(DIAGRAM_CLEARED, DiagramClearedEvent(discarded=discarded))
