"""Port interface to the embedded diagram editor."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Optional

from diagram_engine.logging import get_logger

logger = get_logger("editor")

# Called with (document, request_id). request_id is None when the editor
# cannot echo the id of the export request it is answering.
ExportHandler = Callable[[str, Optional[str]], None]


class EditorPort(ABC):
    """Boundary to an editor surface that renders the diagram.

    Implementations push documents to the editor and ask it to export the
    live document. Exports arrive out of band through ``deliver_export``,
    which forwards them to the registered handler.
    """

    def __init__(self) -> None:
        self._export_handler: ExportHandler | None = None

    def set_export_handler(self, handler: ExportHandler | None) -> None:
        """Register the receiver of export-complete events (one at a time)."""
        self._export_handler = handler

    def deliver_export(self, document: str, request_id: str | None = None) -> None:
        """Hand an export-complete event to the registered handler."""
        if self._export_handler is None:
            logger.debug("Export event with no handler registered (request_id=%s)", request_id)
            return
        self._export_handler(document, request_id)

    @abstractmethod
    async def trigger_export(self, request_id: str) -> None:
        """Ask the editor to export its document. Does not wait for the result."""

    @abstractmethod
    async def replace_visible_document(self, document: str) -> None:
        """Make ``document`` the visible diagram.

        Raises:
            LoadFailureError: the editor rejected the document.
        """
