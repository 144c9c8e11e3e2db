"""Registry of the tools offered to the model, and validation of their calls."""
from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from diagram_engine.errors import ToolCallValidationError
from diagram_engine.models import ToolPayload

# Validates decoded arguments into a payload; raises ToolCallValidationError.
ArgumentParser = Callable[[dict[str, Any]], ToolPayload]


@dataclass
class ToolDefinition:
    """A tool as advertised to the model, plus the parser for its arguments."""

    name: str
    description: str
    parameters: dict[str, Any]  # JSON schema of the arguments object
    parser: ArgumentParser

    def parse(self, arguments: dict[str, Any]) -> ToolPayload:
        return self.parser(arguments)


class ToolRegistry:
    """Tools the dispatcher can execute, keyed by name."""

    def __init__(self, tools: list[ToolDefinition] | None = None) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        self._tools[tool.name] = tool

    def unregister(self, name: str) -> bool:
        return self._tools.pop(name, None) is not None

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def list_tools(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def parse_call(self, name: str, arguments: Any) -> ToolPayload:
        """
        Validate one raw tool call into its payload.

        ``arguments`` may be a mapping or the JSON text of one, as emitted by
        streaming function-calling APIs. An empty string counts as ``{}``.

        Raises:
            ToolCallValidationError: unknown tool or malformed arguments.
        """
        tool = self._tools.get(name)
        if tool is None:
            known = ", ".join(self._tools) or "none"
            raise ToolCallValidationError(name, f"unknown tool (available: {known})")

        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError as e:
                raise ToolCallValidationError(name, f"arguments are not valid JSON: {e}") from e
        if not isinstance(arguments, Mapping):
            raise ToolCallValidationError(name, "arguments must be an object")
        return tool.parse(dict(arguments))

    def get_definitions(self) -> list[dict[str, Any]]:
        """Definitions in OpenAI function-calling format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.parameters,
                },
            }
            for tool in self._tools.values()
        ]

    def get_anthropic_definitions(self) -> list[dict[str, Any]]:
        """Definitions in Anthropic tool-use format."""
        return [
            {"name": tool.name, "description": tool.description, "input_schema": tool.parameters}
            for tool in self._tools.values()
        ]
