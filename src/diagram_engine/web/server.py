"""Web bridge server using Starlette.

The browser tab hosting the draw.io embed connects to ``/ws/editor``; the
conversation loop posts tool calls to ``/api/tool-calls`` and receives the
tool message to append to the conversation.
"""
from __future__ import annotations

import json
from typing import Any

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse
from starlette.routing import Route, WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect

from diagram_engine.config import EngineConfig
from diagram_engine.editor.websocket import WebSocketEditor
from diagram_engine.errors import DiagramEngineError, HistoryIndexError
from diagram_engine.logging import get_logger
from diagram_engine.session import DiagramSession

logger = get_logger("web")


def create_session(config: EngineConfig | None = None) -> DiagramSession:
    """Create a session whose editor is the browser attached over WebSocket."""
    return DiagramSession(editor=WebSocketEditor(), config=config)


def create_app(session: DiagramSession | None = None) -> Starlette:
    """Create the web bridge Starlette application.

    Args:
        session: Session to serve; must use a WebSocketEditor. A new one is
            created when omitted.
    """
    _session = session or create_session()
    editor = _session.editor
    if not isinstance(editor, WebSocketEditor):
        raise TypeError("The web bridge needs a session backed by a WebSocketEditor")

    async def index(request: Request) -> HTMLResponse:
        return HTMLResponse(
            "<h1>Diagram Engine</h1><p>Editor socket: <code>/ws/editor</code></p>"
        )

    async def api_tools(request: Request) -> JSONResponse:
        """List tool definitions for the model."""
        fmt = request.query_params.get("format", "openai")
        return JSONResponse({"tools": _session.tool_definitions(fmt)})

    async def api_tool_calls(request: Request) -> JSONResponse:
        """Dispatch one tool call and return its result."""
        try:
            body = await request.json()
        except json.JSONDecodeError:
            return JSONResponse({"error": "Request body must be JSON"}, status_code=400)
        if not isinstance(body, dict) or not body.get("id") or not body.get("name"):
            return JSONResponse({"error": "Expected {id, name, arguments}"}, status_code=400)

        result = await _session.dispatcher.dispatch_tool_call(body)
        return JSONResponse({"message": result.to_message(), "result": result.to_dict()})

    async def api_diagram(request: Request) -> JSONResponse:
        current = _session.history.current
        return JSONResponse({
            "xml": _session.visible_document,
            "index": current.index if current is not None else None,
            "editor_connected": editor.connected,
        })

    async def api_history(request: Request) -> JSONResponse:
        return JSONResponse({
            "position": _session.history.position,
            "snapshots": _session.history.to_list(),
        })

    async def api_history_restore(request: Request) -> JSONResponse:
        index = request.path_params["index"]
        try:
            snapshot = await _session.restore(index)
        except HistoryIndexError as e:
            return JSONResponse({"error": str(e)}, status_code=404)
        except DiagramEngineError as e:
            return JSONResponse({"error": str(e)}, status_code=409)
        return JSONResponse(snapshot.summary())

    async def api_clear(request: Request) -> JSONResponse:
        try:
            await _session.clear()
        except DiagramEngineError as e:
            return JSONResponse({"error": str(e)}, status_code=409)
        return JSONResponse({"cleared": True})

    async def editor_socket(websocket: WebSocket) -> None:
        """WebSocket endpoint for the browser-hosted editor."""
        await websocket.accept()
        await editor.attach(websocket)
        logger.info("Editor connected")
        try:
            while True:
                data = await websocket.receive_json()
                if isinstance(data, dict):
                    editor.handle_message(data)
                else:
                    await websocket.send_json({"type": "error", "error": "Expected an object"})
        except WebSocketDisconnect:
            logger.info("Editor disconnected")
        finally:
            editor.detach(websocket)

    routes = [
        Route("/", index),
        Route("/api/tools", api_tools, methods=["GET"]),
        Route("/api/tool-calls", api_tool_calls, methods=["POST"]),
        Route("/api/diagram", api_diagram, methods=["GET"]),
        Route("/api/history", api_history, methods=["GET"]),
        Route("/api/history/{index:int}/restore", api_history_restore, methods=["POST"]),
        Route("/api/clear", api_clear, methods=["POST"]),
        WebSocketRoute("/ws/editor", editor_socket),
    ]

    app = Starlette(routes=routes)
    app.state.session = _session
    return app


def run_server(config: EngineConfig | None = None) -> None:
    """Run the web bridge server."""
    import uvicorn

    config = config or EngineConfig()
    app = create_app(create_session(config))
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
