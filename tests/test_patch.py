"""Tests for exact-text patching."""

from __future__ import annotations

import pytest

from diagram_engine.errors import PatchNotFoundError
from diagram_engine.models import EditOperation
from diagram_engine.patch import apply_edits, apply_edits_detailed


def _edit(search: str, replace: str) -> EditOperation:
    return EditOperation(search=search, replace=replace)


class TestApplyEdits:
    """Tests for apply_edits."""

    def test_empty_batch_returns_document_unchanged(self, sample_document: str) -> None:
        """An empty batch is the identity."""
        assert apply_edits(sample_document, []) == sample_document

    def test_replaces_exact_text(self, sample_document: str) -> None:
        """Should replace the search text and leave everything else intact."""
        result = apply_edits(sample_document, [_edit('value="Start"', 'value="Begin"')])

        assert 'value="Begin"' in result
        assert 'value="Start"' not in result
        assert result == sample_document.replace('value="Start"', 'value="Begin"')

    def test_first_match_only(self) -> None:
        """Only the first occurrence is replaced."""
        assert apply_edits("AA", [_edit("A", "B")]) == "BA"

    def test_sequential_dependency(self) -> None:
        """Each edit sees the output of the previous one."""
        edits = [_edit("X", "XY"), _edit("XY", "Z")]

        assert apply_edits("X", edits) == "Z"

    def test_whitespace_must_match_exactly(self, sample_document: str) -> None:
        """Indentation differences are not forgiven."""
        with pytest.raises(PatchNotFoundError):
            apply_edits(sample_document, [_edit('<mxCell id="0"/>\n<mxCell id="1"', "")])

    def test_multiline_search(self, sample_document: str) -> None:
        """Multi-line blocks with indentation match when copied verbatim."""
        search = '    <mxCell id="0"/>\n    <mxCell id="1" parent="0"/>'
        replace = '    <mxCell id="0"/>\n    <mxCell id="layer" parent="0"/>'

        result = apply_edits(sample_document, [_edit(search, replace)])

        assert '<mxCell id="layer" parent="0"/>' in result

    def test_failure_on_first_edit(self) -> None:
        """A missing search term raises with its index."""
        with pytest.raises(PatchNotFoundError) as exc_info:
            apply_edits("abc", [_edit("zzz", "y")])

        assert exc_info.value.index == 0
        assert exc_info.value.search == "zzz"

    def test_later_failure_rolls_back_everything(self) -> None:
        """If edit k>0 fails, no earlier edit is visible anywhere."""
        original = "alpha beta gamma"
        edits = [_edit("alpha", "ALPHA"), _edit("beta", "BETA"), _edit("delta", "DELTA")]

        with pytest.raises(PatchNotFoundError) as exc_info:
            apply_edits(original, edits)

        assert exc_info.value.index == 2
        assert original == "alpha beta gamma"

    def test_search_removed_by_earlier_edit_fails(self) -> None:
        """Search terms are evaluated against the working copy, not the input."""
        with pytest.raises(PatchNotFoundError) as exc_info:
            apply_edits("one two", [_edit("two", "three"), _edit("two", "four")])

        assert exc_info.value.index == 1

    def test_replace_with_empty_string_deletes(self) -> None:
        assert apply_edits("keep-drop-keep", [_edit("drop-", "")]) == "keep-keep"

    def test_error_message_mentions_edit_number(self) -> None:
        with pytest.raises(PatchNotFoundError, match="edit #2"):
            apply_edits("abc", [_edit("a", "b"), _edit("q", "r")])


class TestApplyEditsDetailed:
    """Tests for span reporting."""

    def test_spans_track_replacements(self) -> None:
        result = apply_edits_detailed("hello world", [_edit("world", "there")])

        assert result.document == "hello there"
        assert result.spans == ((6, 11),)
        assert result.edits_applied == 1

    def test_empty_batch_has_no_spans(self) -> None:
        result = apply_edits_detailed("doc", [])

        assert result.document == "doc"
        assert result.edits_applied == 0
