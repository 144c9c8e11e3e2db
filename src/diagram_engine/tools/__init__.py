"""Diagram tools exposed to the model."""
from __future__ import annotations

from diagram_engine.tools.diagram import (
    DISPLAY_DIAGRAM,
    EDIT_DIAGRAM,
    display_diagram_tool,
    edit_diagram_tool,
    parse_display_diagram,
    parse_edit_diagram,
)
from diagram_engine.tools.registry import ToolDefinition, ToolRegistry

__all__ = [
    "ToolRegistry",
    "ToolDefinition",
    "DISPLAY_DIAGRAM",
    "EDIT_DIAGRAM",
    "display_diagram_tool",
    "edit_diagram_tool",
    "parse_display_diagram",
    "parse_edit_diagram",
    "create_diagram_tools",
    "create_registry",
]


def create_diagram_tools() -> list[ToolDefinition]:
    """Create the display_diagram and edit_diagram tools."""
    return [display_diagram_tool(), edit_diagram_tool()]


def create_registry() -> ToolRegistry:
    """Create a registry holding the diagram tools."""
    return ToolRegistry(create_diagram_tools())
