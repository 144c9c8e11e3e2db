"""Shared pytest fixtures for diagram-engine tests."""

from textwrap import dedent

import pytest

from diagram_engine import DiagramSession, EngineConfig, InMemoryEditor


@pytest.fixture
def sample_document() -> str:
    """A small flowchart with one vertex."""
    return dedent("""\
        <mxGraphModel dx="800" dy="600" grid="1">
          <root>
            <mxCell id="0"/>
            <mxCell id="1" parent="0"/>
            <mxCell id="2" value="Start" style="rounded=1;whiteSpace=wrap;" vertex="1" parent="1">
              <mxGeometry x="40" y="40" width="120" height="60" as="geometry"/>
            </mxCell>
          </root>
        </mxGraphModel>""")


@pytest.fixture
def editor(sample_document: str) -> InMemoryEditor:
    """An in-memory editor showing the sample document."""
    return InMemoryEditor(sample_document)


@pytest.fixture
def fast_config() -> EngineConfig:
    """Config with a short export deadline so timeouts stay quick."""
    return EngineConfig(export_timeout_seconds=0.05)


@pytest.fixture
def session(editor: InMemoryEditor, fast_config: EngineConfig) -> DiagramSession:
    """A session driving the in-memory editor."""
    return DiagramSession(editor=editor, config=fast_config)
