"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
import yaml

from diagram_engine.cli import cmd_apply, cmd_config, cmd_format, cmd_tools


class MockArgs:
    """Mock argparse namespace for testing."""

    def __init__(self, **kwargs):
        self.document = kwargs.get("document")
        self.edits = kwargs.get("edits")
        self.output = kwargs.get("output")
        self.format = kwargs.get("format", "openai")
        self.config = kwargs.get("config")
        self.config_command = kwargs.get("config_command")


@pytest.fixture
def document_file(tmp_path: Path, sample_document: str) -> Path:
    path = tmp_path / "diagram.xml"
    path.write_text(sample_document)
    return path


def _write_edits(tmp_path: Path, edits) -> Path:
    path = tmp_path / "edits.json"
    path.write_text(json.dumps(edits))
    return path


class TestCmdApply:
    """Tests for the apply command."""

    def test_apply_to_stdout(self, tmp_path: Path, document_file: Path, sample_document: str, capsys) -> None:
        """Should print the patched document."""
        edits = _write_edits(tmp_path, [{"search": "Start", "replace": "Begin"}])

        cmd_apply(MockArgs(document=str(document_file), edits=str(edits)))

        assert capsys.readouterr().out == sample_document.replace("Start", "Begin")

    def test_apply_accepts_tool_arguments(self, tmp_path: Path, document_file: Path, capsys) -> None:
        """Should accept the {"edits": [...]} form used by edit_diagram."""
        edits = _write_edits(tmp_path, {"edits": [{"search": "Start", "replace": "Go"}]})

        cmd_apply(MockArgs(document=str(document_file), edits=str(edits)))

        assert 'value="Go"' in capsys.readouterr().out

    def test_apply_to_file(self, tmp_path: Path, document_file: Path, capsys) -> None:
        edits = _write_edits(tmp_path, [{"search": "Start", "replace": "Go"}])
        output = tmp_path / "out.xml"

        cmd_apply(MockArgs(document=str(document_file), edits=str(edits), output=str(output)))

        assert 'value="Go"' in output.read_text()
        assert "Applied 1 edit(s)" in capsys.readouterr().out

    def test_missing_pattern_exits_1(self, tmp_path: Path, document_file: Path, capsys) -> None:
        """Should leave nothing written when a search term is missing."""
        edits = _write_edits(
            tmp_path,
            [{"search": "Start", "replace": "Go"}, {"search": "Missing", "replace": "x"}],
        )
        output = tmp_path / "out.xml"

        with pytest.raises(SystemExit) as exc_info:
            cmd_apply(MockArgs(document=str(document_file), edits=str(edits), output=str(output)))

        assert exc_info.value.code == 1
        assert not output.exists()
        assert "Edit failed" in capsys.readouterr().out

    def test_invalid_edits_exit_2(self, tmp_path: Path, document_file: Path) -> None:
        edits = _write_edits(tmp_path, [{"search": "Start"}])

        with pytest.raises(SystemExit) as exc_info:
            cmd_apply(MockArgs(document=str(document_file), edits=str(edits)))

        assert exc_info.value.code == 2


class TestCmdTools:
    """Tests for the tools command."""

    def test_openai_format(self, capsys) -> None:
        cmd_tools(MockArgs(format="openai"))

        out = capsys.readouterr().out
        assert '"edit_diagram"' in out
        assert '"function"' in out

    def test_anthropic_format(self, capsys) -> None:
        cmd_tools(MockArgs(format="anthropic"))

        assert '"input_schema"' in capsys.readouterr().out


class TestCmdFormat:
    """Tests for the format command."""

    def test_format_prints_document(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "flat.xml"
        path.write_text('<mxGraphModel><root><mxCell id="0"/></root></mxGraphModel>')

        cmd_format(MockArgs(document=str(path)))

        out = capsys.readouterr().out
        assert "<root>" in out
        assert "mxCell" in out


class TestCmdConfig:
    """Tests for config subcommands."""

    def test_init_writes_defaults(self, tmp_path: Path) -> None:
        output = tmp_path / "diagram-engine.yaml"

        cmd_config(MockArgs(config_command="init", output=str(output)))

        data = yaml.safe_load(output.read_text())
        assert data["export_timeout_seconds"] == 10.0
        assert data["port"] == 8080

    def test_init_refuses_to_overwrite(self, tmp_path: Path) -> None:
        output = tmp_path / "diagram-engine.yaml"
        output.write_text("port: 1\n")

        with pytest.raises(SystemExit):
            cmd_config(MockArgs(config_command="init", output=str(output)))
        assert output.read_text() == "port: 1\n"

    def test_show_reads_file(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("export_timeout_seconds: 4\n")

        cmd_config(MockArgs(config_command="show", config=str(path)))

        assert "export_timeout_seconds: 4.0" in capsys.readouterr().out

    def test_show_invalid_config_exits_2(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("export_timeout_seconds: -1\n")

        with pytest.raises(SystemExit) as exc_info:
            cmd_config(MockArgs(config_command="show", config=str(path)))

        assert exc_info.value.code == 2
