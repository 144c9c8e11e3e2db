"""Exception hierarchy for the diagram engine."""
from __future__ import annotations


class DiagramEngineError(Exception):
    """Base class for all diagram engine errors."""


class ConfigError(DiagramEngineError):
    """Raised when configuration values are invalid."""


class ExportTimeoutError(DiagramEngineError):
    """The editor did not deliver an export before the deadline."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Chart export timed out after {timeout:g} seconds")
        self.timeout = timeout


class ExportInProgressError(DiagramEngineError):
    """A snapshot was requested while another request is still pending."""

    def __init__(self) -> None:
        super().__init__("An export request is already in flight")


class PatchNotFoundError(DiagramEngineError):
    """An edit's search text was not present when it was evaluated."""

    def __init__(self, index: int, search: str) -> None:
        preview = search if len(search) <= 200 else search[:200] + "..."
        super().__init__(
            f"Search pattern not found in edit #{index + 1}; no edits were applied.\n"
            f"Pattern:\n{preview}"
        )
        self.index = index
        self.search = search


class LoadFailureError(DiagramEngineError):
    """The editor rejected a full-document load."""


class HistoryIndexError(DiagramEngineError, IndexError):
    """A history position does not exist."""

    def __init__(self, position: int, size: int) -> None:
        super().__init__(f"History position {position} out of range (size {size})")
        self.position = position
        self.size = size


class ToolCallValidationError(DiagramEngineError):
    """A tool call could not be validated into a known request."""

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(f"Invalid call to '{tool_name}': {message}")
        self.tool_name = tool_name
