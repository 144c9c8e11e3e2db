"""Append-only history of diagram snapshots with a browsing pointer."""
from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from diagram_engine.errors import HistoryIndexError
from diagram_engine.models import DiagramSnapshot, SnapshotSource


class DiagramHistory:
    """
    Ordered snapshots plus a current-position pointer.

    New snapshots always go to the end, whatever the pointer says, and the
    pointer follows them. Moving the pointer back never deletes anything, so
    every version stays reachable until ``clear()``.
    """

    def __init__(self) -> None:
        self._snapshots: list[DiagramSnapshot] = []
        self._position: int | None = None

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[DiagramSnapshot]:
        return iter(self._snapshots)

    def __getitem__(self, position: int) -> DiagramSnapshot:
        self._check(position)
        return self._snapshots[position]

    @property
    def position(self) -> int | None:
        """Index of the current snapshot, ``None`` when empty."""
        return self._position

    @property
    def current(self) -> DiagramSnapshot | None:
        if self._position is None:
            return None
        return self._snapshots[self._position]

    @property
    def snapshots(self) -> tuple[DiagramSnapshot, ...]:
        return tuple(self._snapshots)

    def append(
        self, document: str, source: SnapshotSource = SnapshotSource.MANUAL
    ) -> DiagramSnapshot:
        """Add ``document`` at the end and point at it."""
        snapshot = DiagramSnapshot(index=len(self._snapshots), document=document, source=source)
        self._snapshots.append(snapshot)
        self._position = snapshot.index
        return snapshot

    def move_to(self, position: int) -> DiagramSnapshot:
        """Point at an existing snapshot without changing the sequence."""
        self._check(position)
        self._position = position
        return self._snapshots[position]

    def clear(self) -> int:
        """Drop every snapshot. Returns how many were dropped."""
        count = len(self._snapshots)
        self._snapshots.clear()
        self._position = None
        return count

    def to_list(self) -> list[dict[str, Any]]:
        """Summaries of all snapshots, flagging the current one."""
        return [
            {**snapshot.summary(), "current": snapshot.index == self._position}
            for snapshot in self._snapshots
        ]

    def _check(self, position: int) -> None:
        if not 0 <= position < len(self._snapshots):
            raise HistoryIndexError(position, len(self._snapshots))
