"""The display_diagram and edit_diagram tools."""
from __future__ import annotations

from typing import Any

from diagram_engine.errors import ToolCallValidationError
from diagram_engine.models import DisplayDiagram, EditDiagram, EditOperation
from diagram_engine.tools.registry import ToolDefinition

DISPLAY_DIAGRAM = "display_diagram"
EDIT_DIAGRAM = "edit_diagram"

DISPLAY_DIAGRAM_DESCRIPTION = """\
Display a diagram on draw.io. You only need to pass the nodes inside the <root> tag \
(including the <root> tag itself) in the XML string.
For example:
<root>
  <mxCell id="0"/>
  <mxCell id="1" parent="0"/>
  <mxCell id="2" value="Hello, World!" style="shape=rectangle" parent="1" vertex="1">
    <mxGeometry x="20" y="20" width="100" height="100" as="geometry"/>
  </mxCell>
</root>
Use this for creating a new diagram or for a major overhaul of the current one."""

EDIT_DIAGRAM_DESCRIPTION = """\
Edit specific parts of the current diagram by replacing exact line matches. \
Use this tool to make targeted fixes without regenerating the entire XML.
IMPORTANT: Keep edits concise:
- Only include the lines that are changing, plus 1-2 surrounding lines for context if needed
- Break large changes into multiple smaller edits
- Each search must contain complete lines (never truncate mid-line)
- First match only - be specific enough to target the right element"""


def parse_display_diagram(arguments: dict[str, Any]) -> DisplayDiagram:
    xml = arguments.get("xml")
    if not isinstance(xml, str):
        raise ToolCallValidationError(DISPLAY_DIAGRAM, "'xml' must be a string")
    if not xml.strip():
        raise ToolCallValidationError(DISPLAY_DIAGRAM, "'xml' must not be empty")
    return DisplayDiagram(document=xml)


def parse_edit_diagram(arguments: dict[str, Any]) -> EditDiagram:
    edits = arguments.get("edits")
    if not isinstance(edits, list):
        raise ToolCallValidationError(EDIT_DIAGRAM, "'edits' must be an array")

    operations: list[EditOperation] = []
    for i, edit in enumerate(edits):
        if not isinstance(edit, dict):
            raise ToolCallValidationError(EDIT_DIAGRAM, f"edit #{i + 1} must be an object")
        search = edit.get("search")
        replace = edit.get("replace")
        if not isinstance(search, str) or not isinstance(replace, str):
            raise ToolCallValidationError(
                EDIT_DIAGRAM, f"edit #{i + 1} needs string 'search' and 'replace'"
            )
        if not search:
            raise ToolCallValidationError(EDIT_DIAGRAM, f"edit #{i + 1} has an empty 'search'")
        operations.append(EditOperation(search=search, replace=replace))
    return EditDiagram(edits=tuple(operations))


def display_diagram_tool() -> ToolDefinition:
    return ToolDefinition(
        name=DISPLAY_DIAGRAM,
        description=DISPLAY_DIAGRAM_DESCRIPTION,
        parameters={
            "type": "object",
            "properties": {
                "xml": {
                    "type": "string",
                    "description": "XML string to be displayed on draw.io",
                },
            },
            "required": ["xml"],
        },
        parser=parse_display_diagram,
    )


def edit_diagram_tool() -> ToolDefinition:
    return ToolDefinition(
        name=EDIT_DIAGRAM,
        description=EDIT_DIAGRAM_DESCRIPTION,
        parameters={
            "type": "object",
            "properties": {
                "edits": {
                    "type": "array",
                    "description": "Array of search/replace pairs to apply sequentially",
                    "items": {
                        "type": "object",
                        "properties": {
                            "search": {
                                "type": "string",
                                "description": (
                                    "Exact lines to search for "
                                    "(including whitespace and indentation)"
                                ),
                            },
                            "replace": {
                                "type": "string",
                                "description": "Replacement lines",
                            },
                        },
                        "required": ["search", "replace"],
                    },
                },
            },
            "required": ["edits"],
        },
        parser=parse_edit_diagram,
    )
