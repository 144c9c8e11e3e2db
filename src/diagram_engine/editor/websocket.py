"""Editor port backed by a browser-hosted draw.io embed over a WebSocket.

Wire format (JSON text frames):

    server -> browser  {"type": "export", "format": "xml", "request_id": "..."}
    server -> browser  {"type": "load", "xml": "..."}
    browser -> server  {"type": "export_complete", "xml": "...", "request_id": "..."}
    browser -> server  {"type": "load_error", "error": "..."}
"""
from __future__ import annotations

from typing import Any

from starlette.websockets import WebSocket, WebSocketState

from diagram_engine.editor.base import EditorPort
from diagram_engine.errors import LoadFailureError
from diagram_engine.logging import get_logger

logger = get_logger("editor.websocket")


class WebSocketEditor(EditorPort):
    """Relay editor commands to the browser tab that hosts the diagram.

    Only one browser is attached at a time; a new connection replaces the
    previous one. Loads issued while nothing is attached are kept and pushed
    as soon as a browser connects. Export requests issued while nothing is
    attached are dropped, so the caller runs into its deadline.
    """

    def __init__(self) -> None:
        super().__init__()
        self._socket: WebSocket | None = None
        self._queued_load: str | None = None

    @property
    def connected(self) -> bool:
        return self._socket is not None

    async def attach(self, websocket: WebSocket) -> None:
        """Use ``websocket`` as the editor connection."""
        if self._socket is not None and self._socket is not websocket:
            logger.info("Replacing attached editor connection")
        self._socket = websocket
        if self._queued_load is not None:
            document, self._queued_load = self._queued_load, None
            await self.replace_visible_document(document)

    def detach(self, websocket: WebSocket | None = None) -> None:
        """Forget the connection (only if it is ``websocket``, when given)."""
        if websocket is None or websocket is self._socket:
            self._socket = None

    async def trigger_export(self, request_id: str) -> None:
        if self._socket is None:
            logger.warning("Export requested with no editor attached (request_id=%s)", request_id)
            return
        try:
            await self._send({"type": "export", "format": "xml", "request_id": request_id})
        except Exception as e:
            logger.warning("Failed to send export request %s: %s", request_id, e)
            self.detach()

    async def replace_visible_document(self, document: str) -> None:
        if self._socket is None:
            logger.debug("No editor attached, queueing load (%d chars)", len(document))
            self._queued_load = document
            return
        try:
            await self._send({"type": "load", "xml": document})
        except Exception as e:
            self.detach()
            raise LoadFailureError(f"Editor connection lost while loading: {e}") from e

    def handle_message(self, data: dict[str, Any]) -> None:
        """Route one inbound frame from the browser."""
        msg_type = data.get("type", "")
        if msg_type == "export_complete":
            self.deliver_export(str(data.get("xml", "")), data.get("request_id"))
        elif msg_type == "load_error":
            logger.warning("Editor rejected a load: %s", data.get("error", "unknown error"))
        else:
            logger.debug("Ignoring editor message of type %r", msg_type)

    async def _send(self, payload: dict[str, Any]) -> None:
        socket = self._socket
        if socket is None or socket.application_state != WebSocketState.CONNECTED:
            raise RuntimeError("editor socket is not connected")
        await socket.send_json(payload)
