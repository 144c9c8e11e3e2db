"""
Core data models for the diagram engine.

These models describe diagram snapshots, edit operations, validated tool
call payloads and the results reported back into the conversation.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

# ---------------------------------------------------------------------------
# Documents and edits
# ---------------------------------------------------------------------------


class SnapshotSource(str, Enum):
    """How a snapshot came to exist."""

    DISPLAY = "display"  # Full replacement from display_diagram
    EDIT = "edit"  # Successfully patched edit_diagram batch
    MANUAL = "manual"  # Loaded directly through the session API


@dataclass(frozen=True)
class DiagramSnapshot:
    """A complete diagram document captured at one point in time."""

    index: int
    document: str
    source: SnapshotSource = SnapshotSource.MANUAL
    created_at: float = field(default_factory=time.time)

    def summary(self) -> dict[str, Any]:
        """Short description without the document body."""
        return {
            "index": self.index,
            "source": self.source.value,
            "created_at": self.created_at,
            "length": len(self.document),
        }


@dataclass(frozen=True)
class EditOperation:
    """One exact-text search/replace instruction."""

    search: str
    replace: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EditOperation:
        return cls(search=data["search"], replace=data["replace"])

    def to_dict(self) -> dict[str, str]:
        return {"search": self.search, "replace": self.replace}


# ---------------------------------------------------------------------------
# Tool calls
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DisplayDiagram:
    """Replace the whole diagram with ``document``."""

    document: str


@dataclass(frozen=True)
class EditDiagram:
    """Apply ``edits`` in order to the live diagram."""

    edits: tuple[EditOperation, ...]


ToolPayload = Union[DisplayDiagram, EditDiagram]


@dataclass(frozen=True)
class ToolCall:
    """A validated tool call with its correlation id."""

    id: str
    name: str
    payload: ToolPayload


class ToolCallState(str, Enum):
    """Lifecycle of a single tool call inside the dispatcher."""

    RECEIVED = "received"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REPORTED = "reported"


@dataclass
class ToolResult:
    """
    Outcome of one tool call, reported back to the driving agent.

    ``state`` is SUCCEEDED or FAILED. Failures carry ``reason`` and the last
    document the engine managed to read from the editor so the agent can
    recompute its search strings.
    """

    tool_call_id: str
    tool_name: str
    state: ToolCallState
    content: str
    reason: str | None = None
    last_known_document: str | None = None
    edits_applied: int = 0

    @property
    def success(self) -> bool:
        return self.state == ToolCallState.SUCCEEDED

    def failure_payload(self) -> dict[str, str] | None:
        """The structured ``{reason, lastKnownDocument}`` report, for failures."""
        if self.success:
            return None
        return {
            "reason": self.reason or "",
            "lastKnownDocument": self.last_known_document or "",
        }

    def to_message(self) -> dict[str, Any]:
        """Format as a tool-role conversation message."""
        return {
            "role": "tool",
            "tool_call_id": self.tool_call_id,
            "name": self.tool_name,
            "content": self.content,
        }

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "tool_call_id": self.tool_call_id,
            "tool_name": self.tool_name,
            "state": self.state.value,
            "success": self.success,
            "content": self.content,
            "edits_applied": self.edits_applied,
        }
        failure = self.failure_payload()
        if failure is not None:
            data["failure"] = failure
        return data
