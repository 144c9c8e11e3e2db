"""Headless editor that keeps the visible document in memory."""
from __future__ import annotations

import asyncio

from diagram_engine.document import EMPTY_DIAGRAM
from diagram_engine.editor.base import EditorPort
from diagram_engine.errors import LoadFailureError


class InMemoryEditor(EditorPort):
    """
    Editor stand-in used by the CLI and in tests.

    Exports answer with whatever document is visible when the answer fires,
    ``export_delay`` seconds after the request. Setting ``responsive`` to
    False makes the editor swallow export requests, and ``reject_loads``
    makes every load fail with the given reason.
    """

    def __init__(
        self,
        document: str = EMPTY_DIAGRAM,
        *,
        export_delay: float = 0.0,
        responsive: bool = True,
        echo_request_id: bool = True,
    ) -> None:
        super().__init__()
        self.document = document
        self.export_delay = export_delay
        self.responsive = responsive
        self.echo_request_id = echo_request_id
        self.reject_loads: str | None = None
        self.loads: list[str] = []
        self.export_requests: list[str] = []

    async def trigger_export(self, request_id: str) -> None:
        self.export_requests.append(request_id)
        if not self.responsive:
            return
        loop = asyncio.get_running_loop()
        echoed = request_id if self.echo_request_id else None
        if self.export_delay > 0:
            loop.call_later(self.export_delay, self._answer_export, echoed)
        else:
            loop.call_soon(self._answer_export, echoed)

    def _answer_export(self, request_id: str | None) -> None:
        self.deliver_export(self.document, request_id)

    async def replace_visible_document(self, document: str) -> None:
        if self.reject_loads is not None:
            raise LoadFailureError(self.reject_loads)
        self.document = document
        self.loads.append(document)
