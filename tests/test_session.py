"""Tests for DiagramSession."""

from __future__ import annotations

import pytest

from diagram_engine import DiagramSession, EngineConfig, InMemoryEditor
from diagram_engine.document import EMPTY_DIAGRAM
from diagram_engine.errors import ExportTimeoutError, PatchNotFoundError
from diagram_engine.models import EditOperation, SnapshotSource


class TestDiagramSession:
    """Tests for the session API."""

    def test_wires_config(self) -> None:
        config = EngineConfig(export_timeout_seconds=2.0, format_exports=True, wrap_root_fragments=False)

        session = DiagramSession(config=config)

        assert session.bridge.timeout == 2.0
        assert session.bridge.format_exports is True
        assert session.loader.wrap_root_fragments is False
        assert session.loader.history is session.history

    def test_tool_definitions(self, session: DiagramSession) -> None:
        openai = session.tool_definitions()
        anthropic = session.tool_definitions("anthropic")

        assert [d["function"]["name"] for d in openai] == ["display_diagram", "edit_diagram"]
        assert [d["name"] for d in anthropic] == ["display_diagram", "edit_diagram"]

    @pytest.mark.asyncio
    async def test_fetch_document(self, session: DiagramSession, sample_document: str) -> None:
        assert await session.fetch_document() == sample_document
        assert session.loader.last_known_document == sample_document

    @pytest.mark.asyncio
    async def test_display_and_restore(self, session: DiagramSession, editor: InMemoryEditor) -> None:
        await session.display("<A/>")
        await session.display("<B/>")

        snapshot = await session.restore(0)

        assert snapshot.document == "<A/>"
        assert editor.document == "<A/>"
        assert session.visible_document == "<A/>"
        assert session.history.current.source == SnapshotSource.MANUAL

    @pytest.mark.asyncio
    async def test_edit(self, session: DiagramSession, editor: InMemoryEditor) -> None:
        snapshot = await session.edit([EditOperation('value="Start"', 'value="Go"')])

        assert 'value="Go"' in snapshot.document
        assert editor.document == snapshot.document

    @pytest.mark.asyncio
    async def test_edit_raises_on_missing_pattern(self, session: DiagramSession) -> None:
        with pytest.raises(PatchNotFoundError):
            await session.edit([EditOperation("missing", "x")])

        assert len(session.history) == 0

    @pytest.mark.asyncio
    async def test_edit_raises_on_timeout(self, session: DiagramSession, editor: InMemoryEditor) -> None:
        editor.responsive = False

        with pytest.raises(ExportTimeoutError):
            await session.edit([EditOperation("Start", "Go")])

    @pytest.mark.asyncio
    async def test_clear(self, session: DiagramSession, editor: InMemoryEditor) -> None:
        await session.display("<A/>")

        await session.clear()

        assert editor.document == EMPTY_DIAGRAM
        assert len(session.history) == 0
