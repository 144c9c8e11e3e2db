"""Exact-text search/replace patching of diagram documents."""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from diagram_engine.errors import PatchNotFoundError
from diagram_engine.logging import get_logger
from diagram_engine.models import EditOperation

logger = get_logger("patch")


@dataclass(frozen=True)
class PatchResult:
    """Patched document plus where each edit landed.

    ``spans`` holds one ``(start, end)`` pair per edit, in the coordinates of
    the working copy right after that edit was applied.
    """

    document: str
    spans: tuple[tuple[int, int], ...]

    @property
    def edits_applied(self) -> int:
        return len(self.spans)


def apply_edits_detailed(document: str, edits: Sequence[EditOperation]) -> PatchResult:
    """Apply ``edits`` in order and report the replaced spans.

    Each edit replaces only the first occurrence of its ``search`` text in the
    working copy, which already contains the effect of every earlier edit.
    Matching is literal: whitespace and indentation must be identical.

    Raises:
        PatchNotFoundError: an edit's search text is absent. Nothing is
            applied; ``document`` is left as the only valid state.
    """
    working = document
    spans: list[tuple[int, int]] = []
    for index, edit in enumerate(edits):
        position = working.find(edit.search)
        if position == -1:
            logger.debug("Edit #%d not found, rolling back %d applied edit(s)", index, index)
            raise PatchNotFoundError(index, edit.search)
        end = position + len(edit.search)
        working = working[:position] + edit.replace + working[end:]
        spans.append((position, position + len(edit.replace)))
    return PatchResult(document=working, spans=tuple(spans))


def apply_edits(document: str, edits: Sequence[EditOperation]) -> str:
    """Apply an edit batch atomically and return the patched document."""
    return apply_edits_detailed(document, edits).document
