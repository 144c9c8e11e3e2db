"""Tests for the web bridge server."""

from __future__ import annotations

import pytest
from starlette.testclient import TestClient

from diagram_engine import DiagramSession, EngineConfig
from diagram_engine.web import create_app, create_session


@pytest.fixture
def web_session() -> DiagramSession:
    return create_session(EngineConfig(export_timeout_seconds=0.05))


@pytest.fixture
def client(web_session: DiagramSession):
    with TestClient(create_app(web_session)) as test_client:
        yield test_client


def _display_call(call_id: str, xml: str) -> dict:
    return {"id": call_id, "name": "display_diagram", "arguments": {"xml": xml}}


class TestToolEndpoints:
    """Tests for /api/tools and /api/tool-calls."""

    def test_index(self, client: TestClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert "/ws/editor" in response.text

    def test_list_tools(self, client: TestClient) -> None:
        response = client.get("/api/tools")

        assert response.status_code == 200
        names = [t["function"]["name"] for t in response.json()["tools"]]
        assert names == ["display_diagram", "edit_diagram"]

    def test_list_tools_anthropic(self, client: TestClient) -> None:
        tools = client.get("/api/tools", params={"format": "anthropic"}).json()["tools"]

        assert "input_schema" in tools[0]

    def test_display_call(self, client: TestClient) -> None:
        response = client.post("/api/tool-calls", json=_display_call("call_1", "<mxGraphModel/>"))

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == {
            "role": "tool",
            "tool_call_id": "call_1",
            "name": "display_diagram",
            "content": "Successfully displayed the diagram.",
        }
        assert data["result"]["success"] is True

    def test_edit_without_editor_times_out(self, client: TestClient) -> None:
        """No browser attached: the export deadline fails the call."""
        body = {
            "id": "call_1",
            "name": "edit_diagram",
            "arguments": {"edits": [{"search": "a", "replace": "b"}]},
        }

        data = client.post("/api/tool-calls", json=body).json()

        assert data["result"]["success"] is False
        assert data["result"]["failure"]["reason"] == "Chart export timed out after 0.05 seconds"
        assert data["message"]["content"].startswith("Edit failed: Chart export timed out")

    def test_invalid_json_body(self, client: TestClient) -> None:
        response = client.post(
            "/api/tool-calls", content=b"{not json", headers={"content-type": "application/json"}
        )

        assert response.status_code == 400

    def test_missing_id(self, client: TestClient) -> None:
        response = client.post("/api/tool-calls", json={"name": "display_diagram"})

        assert response.status_code == 400


class TestDiagramEndpoints:
    """Tests for diagram and history endpoints."""

    def test_diagram_empty(self, client: TestClient) -> None:
        data = client.get("/api/diagram").json()

        assert data["index"] is None
        assert data["editor_connected"] is False

    def test_history_and_restore(self, client: TestClient) -> None:
        client.post("/api/tool-calls", json=_display_call("c1", "<mxGraphModel>A</mxGraphModel>"))
        client.post("/api/tool-calls", json=_display_call("c2", "<mxGraphModel>B</mxGraphModel>"))

        history = client.get("/api/history").json()
        assert history["position"] == 1
        assert [s["source"] for s in history["snapshots"]] == ["display", "display"]

        response = client.post("/api/history/0/restore")
        assert response.status_code == 200
        assert response.json()["index"] == 0
        assert client.get("/api/diagram").json()["xml"] == "<mxGraphModel>A</mxGraphModel>"

    def test_restore_unknown_position(self, client: TestClient) -> None:
        response = client.post("/api/history/5/restore")

        assert response.status_code == 404

    def test_clear(self, client: TestClient, web_session: DiagramSession) -> None:
        client.post("/api/tool-calls", json=_display_call("c1", "<mxGraphModel/>"))

        response = client.post("/api/clear")

        assert response.json() == {"cleared": True}
        assert len(web_session.history) == 0


class TestEditorSocket:
    """Tests for the /ws/editor endpoint."""

    def test_queued_load_is_pushed_on_connect(self, client: TestClient) -> None:
        client.post("/api/tool-calls", json=_display_call("c1", "<mxGraphModel>A</mxGraphModel>"))

        with client.websocket_connect("/ws/editor") as ws:
            assert ws.receive_json() == {"type": "load", "xml": "<mxGraphModel>A</mxGraphModel>"}

    def test_unsolicited_export_is_dropped(self, client: TestClient, web_session: DiagramSession) -> None:
        with client.websocket_connect("/ws/editor") as ws:
            ws.send_json({"type": "export_complete", "xml": "<x/>", "request_id": "export-9"})
            ws.send_json(["not", "an", "object"])
            assert ws.receive_json()["type"] == "error"

        assert web_session.bridge.dropped_exports == 1

    def test_connection_state(self, client: TestClient, web_session: DiagramSession) -> None:
        with client.websocket_connect("/ws/editor") as ws:
            ws.send_json(["ping"])
            ws.receive_json()
            assert client.get("/api/diagram").json()["editor_connected"] is True


def test_app_requires_websocket_editor(session: DiagramSession) -> None:
    with pytest.raises(TypeError):
        create_app(session)
