"""
Diagram session: one editor, one history, one dispatcher.

Provides a high-level API wiring the export bridge, loader and tool
dispatcher around a single editor port.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from diagram_engine.bridge import ExportBridge
from diagram_engine.config import EngineConfig
from diagram_engine.dispatch import ToolDispatcher
from diagram_engine.editor.base import EditorPort
from diagram_engine.editor.memory import InMemoryEditor
from diagram_engine.events import EventBus
from diagram_engine.history import DiagramHistory
from diagram_engine.loader import DiagramLoader
from diagram_engine.models import DiagramSnapshot, EditOperation, SnapshotSource, ToolResult
from diagram_engine.patch import apply_edits
from diagram_engine.tools import create_registry
from diagram_engine.tools.registry import ToolRegistry


class DiagramSession:
    """
    Everything one conversation needs to drive one diagram.

    Example:
        session = DiagramSession(editor=InMemoryEditor())

        await session.display("<root>...</root>")
        result = await session.dispatch("call_1", "edit_diagram", {
            "edits": [{"search": 'value="Old"', "replace": 'value="New"'}],
        })
        print(result.content)
    """

    def __init__(
        self,
        editor: EditorPort | None = None,
        config: EngineConfig | None = None,
        registry: ToolRegistry | None = None,
        events: EventBus | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.editor = editor or InMemoryEditor()
        self.events = events or EventBus()
        self.registry = registry or create_registry()

        self.history = DiagramHistory()
        self.bridge = ExportBridge(
            self.editor,
            timeout=self.config.export_timeout_seconds,
            format_exports=self.config.format_exports,
            events=self.events,
        )
        self.loader = DiagramLoader(
            self.editor,
            self.history,
            events=self.events,
            wrap_root_fragments=self.config.wrap_root_fragments,
        )
        self.dispatcher = ToolDispatcher(
            self.loader, self.bridge, self.registry, events=self.events
        )

    @property
    def visible_document(self) -> str:
        return self.loader.visible_document

    def tool_definitions(self, format: str = "openai") -> list[dict[str, Any]]:
        """Tool definitions to send to the model ("openai" or "anthropic")."""
        if format == "anthropic":
            return self.registry.get_anthropic_definitions()
        return self.registry.get_definitions()

    # ------------------------------------------------------------------
    # Tool calls
    # ------------------------------------------------------------------

    async def dispatch(self, tool_call_id: str, name: str, arguments: Any) -> ToolResult:
        return await self.dispatcher.dispatch(tool_call_id, name, arguments)

    async def dispatch_many(self, tool_calls: Iterable[Mapping[str, Any]]) -> list[ToolResult]:
        return await self.dispatcher.dispatch_many(tool_calls)

    # ------------------------------------------------------------------
    # Direct operations
    # ------------------------------------------------------------------

    async def fetch_document(self, timeout: float | None = None) -> str:
        """Read the live document from the editor (e.g. before a user turn)."""
        async with self.dispatcher.edit_lock:
            document = await self.bridge.request_snapshot(timeout)
        self.loader.observe(document)
        return document

    async def display(self, document: str) -> DiagramSnapshot:
        return await self.loader.load(document, SnapshotSource.MANUAL)

    async def edit(self, edits: Sequence[EditOperation]) -> DiagramSnapshot:
        """Patch the live document. Raises instead of reporting."""
        async with self.dispatcher.edit_lock:
            current = await self.bridge.request_snapshot()
            self.loader.observe(current)
            return await self.loader.load(apply_edits(current, edits), SnapshotSource.MANUAL)

    async def restore(self, position: int) -> DiagramSnapshot:
        return await self.loader.restore(position)

    async def clear(self) -> None:
        await self.loader.clear()
