"""
Diagram Engine - patch and synchronization engine for AI-edited diagrams.

Lets a conversational agent create and modify draw.io diagrams shown in an
embedded editor. Tool calls from the agent become document operations:
full replacement (``display_diagram``) or exact-text search/replace batches
applied atomically to the live document (``edit_diagram``). Every accepted
version is kept in a browsable history.

Example:
    from diagram_engine import DiagramSession, InMemoryEditor

    session = DiagramSession(editor=InMemoryEditor())
    result = await session.dispatch("call_1", "display_diagram", {"xml": "<root>...</root>"})
    conversation.append(result.to_message())
"""

from diagram_engine.bridge import ExportBridge, ExportState
from diagram_engine.config import EngineConfig
from diagram_engine.dispatch import ToolDispatcher
from diagram_engine.document import EMPTY_DIAGRAM, format_xml
from diagram_engine.editor import EditorPort, InMemoryEditor
from diagram_engine.errors import (
    ConfigError,
    DiagramEngineError,
    ExportInProgressError,
    ExportTimeoutError,
    HistoryIndexError,
    LoadFailureError,
    PatchNotFoundError,
    ToolCallValidationError,
)
from diagram_engine.events import (
    DIAGRAM_CLEARED,
    DIAGRAM_LOADED,
    EXPORT_TIMED_OUT,
    HISTORY_RESTORED,
    TOOL_CALL_RECEIVED,
    TOOL_CALL_REPORTED,
    EventBus,
)
from diagram_engine.history import DiagramHistory
from diagram_engine.loader import DiagramLoader
from diagram_engine.models import (
    DiagramSnapshot,
    DisplayDiagram,
    EditDiagram,
    EditOperation,
    SnapshotSource,
    ToolCall,
    ToolCallState,
    ToolResult,
)
from diagram_engine.patch import PatchResult, apply_edits, apply_edits_detailed
from diagram_engine.session import DiagramSession
from diagram_engine.tools import ToolDefinition, ToolRegistry, create_diagram_tools

__version__ = "0.1.0"

__all__ = [
    # Models
    "DiagramSnapshot",
    "EditOperation",
    "DisplayDiagram",
    "EditDiagram",
    "SnapshotSource",
    "ToolCall",
    "ToolCallState",
    "ToolResult",
    # Config
    "EngineConfig",
    # Engine components
    "DiagramSession",
    "ExportBridge",
    "ExportState",
    "DiagramHistory",
    "DiagramLoader",
    "ToolDispatcher",
    "PatchResult",
    "apply_edits",
    "apply_edits_detailed",
    # Documents
    "EMPTY_DIAGRAM",
    "format_xml",
    # Editor
    "EditorPort",
    "InMemoryEditor",
    # Tools
    "ToolDefinition",
    "ToolRegistry",
    "create_diagram_tools",
    # Events
    "EventBus",
    "DIAGRAM_LOADED",
    "HISTORY_RESTORED",
    "DIAGRAM_CLEARED",
    "EXPORT_TIMED_OUT",
    "TOOL_CALL_RECEIVED",
    "TOOL_CALL_REPORTED",
    # Errors
    "DiagramEngineError",
    "ConfigError",
    "ExportTimeoutError",
    "ExportInProgressError",
    "PatchNotFoundError",
    "LoadFailureError",
    "HistoryIndexError",
    "ToolCallValidationError",
]
