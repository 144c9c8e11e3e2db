"""
Tool dispatch loop.

Turns raw tool calls from the conversation loop into diagram operations and
produces exactly one ToolResult per call. Failures never escape as
exceptions: they are reported back to the agent together with the latest
document the engine knows about, so the agent can correct its next call.

Example:
    dispatcher = ToolDispatcher(loader, bridge)
    result = await dispatcher.dispatch("call_1", "edit_diagram", {"edits": [...]})
    conversation.append(result.to_message())
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

from diagram_engine.bridge import ExportBridge
from diagram_engine.errors import (
    DiagramEngineError,
    LoadFailureError,
    ToolCallValidationError,
)
from diagram_engine.events import (
    TOOL_CALL_RECEIVED,
    TOOL_CALL_REPORTED,
    EventBus,
    ToolCallReceivedEvent,
    ToolCallReportedEvent,
)
from diagram_engine.loader import DiagramLoader
from diagram_engine.logging import get_logger
from diagram_engine.models import (
    DisplayDiagram,
    EditDiagram,
    SnapshotSource,
    ToolCall,
    ToolCallState,
    ToolResult,
)
from diagram_engine.patch import apply_edits_detailed
from diagram_engine.tools import create_registry
from diagram_engine.tools.registry import ToolRegistry

logger = get_logger("dispatch")

EDIT_RETRY_HINT = (
    "Please retry with an adjusted search pattern or use display_diagram "
    "if retries are exhausted."
)
DISPLAY_RETRY_HINT = "Please check that the XML is well-formed and call display_diagram again."
INVALID_CALL_HINT = "Check the tool name and make the arguments match the tool schema."


def format_failure(heading: str, reason: str, document: str, hint: str) -> str:
    """Render a failure report the way the agent expects to read it."""
    return f"{heading}: {reason}\n\nCurrent diagram XML:\n```xml\n{document}\n```\n\n{hint}"


class ToolDispatcher:
    """
    Execute diagram tool calls and report their outcome.

    Edit calls are serialized end to end, export round trip included, because
    the export bridge serves one request at a time. Display calls do not
    export and run without waiting for pending edits.

    ``call_states`` tracks calls still in flight; a call leaves it when its
    result is reported, so REPORTED is never stored. A reused tool call id is
    logged if still in flight and processed again, producing one more result.
    """

    def __init__(
        self,
        loader: DiagramLoader,
        bridge: ExportBridge,
        registry: ToolRegistry | None = None,
        *,
        events: EventBus | None = None,
    ) -> None:
        self.loader = loader
        self.bridge = bridge
        self.registry = registry or create_registry()
        self.events = events or EventBus()
        self.call_states: dict[str, ToolCallState] = {}
        self.edit_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def parse(self, tool_call_id: str, name: str, arguments: Any) -> ToolCall:
        """Validate raw arguments (mapping or JSON string) into a ToolCall."""
        payload = self.registry.parse_call(name, arguments)
        return ToolCall(id=tool_call_id, name=name, payload=payload)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def dispatch(self, tool_call_id: str, name: str, arguments: Any) -> ToolResult:
        """Run one tool call and return its (already reported) result."""
        if tool_call_id in self.call_states:
            logger.warning("Tool call id %s was already dispatched", tool_call_id)
        self._transition(tool_call_id, ToolCallState.RECEIVED)
        await self.events.emit(
            TOOL_CALL_RECEIVED,
            ToolCallReceivedEvent(tool_call_id=tool_call_id, tool_name=name, arguments=arguments),
        )

        try:
            call = self.parse(tool_call_id, name, arguments)
        except ToolCallValidationError as e:
            result = self._failure(
                tool_call_id, name, "Invalid tool call", str(e), None, INVALID_CALL_HINT
            )
        else:
            self._transition(tool_call_id, ToolCallState.EXECUTING)
            result = await self._execute(call)

        return await self._report(result)

    async def dispatch_tool_call(self, tool_call: Mapping[str, Any]) -> ToolResult:
        """Dispatch a ``{"id", "name", "arguments"}`` tool call dict."""
        return await self.dispatch(
            str(tool_call.get("id", "")),
            str(tool_call.get("name", "")),
            tool_call.get("arguments", {}),
        )

    async def dispatch_many(self, tool_calls: Iterable[Mapping[str, Any]]) -> list[ToolResult]:
        """Dispatch several tool calls concurrently; results keep input order."""
        return list(
            await asyncio.gather(*(self.dispatch_tool_call(tc) for tc in tool_calls))
        )

    async def _execute(self, call: ToolCall) -> ToolResult:
        payload = call.payload
        if isinstance(payload, DisplayDiagram):
            return await self._display(call, payload)
        if isinstance(payload, EditDiagram):
            async with self.edit_lock:
                return await self._edit(call, payload)
        raise TypeError(f"Unsupported payload type: {type(payload).__name__}")

    async def _display(self, call: ToolCall, payload: DisplayDiagram) -> ToolResult:
        try:
            await self.loader.load(payload.document, SnapshotSource.DISPLAY)
        except LoadFailureError as e:
            return self._failure(
                call.id, call.name, "Display failed", str(e), None, DISPLAY_RETRY_HINT
            )
        except Exception as e:
            logger.exception("Unexpected error in %s (%s)", call.name, call.id)
            return self._failure(
                call.id, call.name, "Display failed", str(e), None, DISPLAY_RETRY_HINT
            )
        return ToolResult(
            tool_call_id=call.id,
            tool_name=call.name,
            state=ToolCallState.SUCCEEDED,
            content="Successfully displayed the diagram.",
        )

    async def _edit(self, call: ToolCall, payload: EditDiagram) -> ToolResult:
        snapshot: str | None = None
        try:
            snapshot = await self.bridge.request_snapshot()
            self.loader.observe(snapshot)
            patched = apply_edits_detailed(snapshot, payload.edits)
            await self.loader.load(patched.document, SnapshotSource.EDIT)
        except DiagramEngineError as e:
            # ExportTimeoutError, PatchNotFoundError, LoadFailureError
            return self._failure(call.id, call.name, "Edit failed", str(e), snapshot, EDIT_RETRY_HINT)
        except Exception as e:
            logger.exception("Unexpected error in %s (%s)", call.name, call.id)
            return self._failure(call.id, call.name, "Edit failed", str(e), snapshot, EDIT_RETRY_HINT)

        count = patched.edits_applied
        return ToolResult(
            tool_call_id=call.id,
            tool_name=call.name,
            state=ToolCallState.SUCCEEDED,
            content=f"Successfully applied {count} edit(s) to the diagram.",
            edits_applied=count,
        )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _failure(
        self,
        tool_call_id: str,
        tool_name: str,
        heading: str,
        reason: str,
        snapshot: str | None,
        hint: str,
    ) -> ToolResult:
        document = snapshot if snapshot is not None else self.loader.last_known_document
        return ToolResult(
            tool_call_id=tool_call_id,
            tool_name=tool_name,
            state=ToolCallState.FAILED,
            content=format_failure(heading, reason, document, hint),
            reason=reason,
            last_known_document=document,
        )

    async def _report(self, result: ToolResult) -> ToolResult:
        self._transition(result.tool_call_id, result.state)
        if result.success:
            logger.debug("%s (%s) succeeded", result.tool_name, result.tool_call_id)
        else:
            logger.warning(
                "%s (%s) failed: %s", result.tool_name, result.tool_call_id, result.reason
            )
        await self.events.emit(
            TOOL_CALL_REPORTED,
            ToolCallReportedEvent(
                tool_call_id=result.tool_call_id,
                tool_name=result.tool_name,
                state=result.state.value,
                content=result.content,
                reason=result.reason,
            ),
        )
        self.call_states.pop(result.tool_call_id, None)
        return result

    def _transition(self, tool_call_id: str, state: ToolCallState) -> None:
        self.call_states[tool_call_id] = state
