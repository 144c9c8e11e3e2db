"""Web bridge between the engine, the browser editor and the conversation loop."""
from __future__ import annotations

from diagram_engine.web.server import create_app, create_session, run_server

__all__ = ["create_app", "create_session", "run_server"]
