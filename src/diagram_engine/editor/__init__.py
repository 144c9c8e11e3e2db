"""Editor ports: the boundary between the engine and the diagram editor."""
from __future__ import annotations

from diagram_engine.editor.base import EditorPort, ExportHandler
from diagram_engine.editor.memory import InMemoryEditor

__all__ = [
    "EditorPort",
    "ExportHandler",
    "InMemoryEditor",
]
