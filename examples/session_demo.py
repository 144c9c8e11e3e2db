#!/usr/bin/env python3
"""
Diagram Engine Demo

Drives a headless editor through the same tool calls a model would issue:
a full display, a successful edit batch, a failing edit and a history
restore.

Usage:
    python examples/session_demo.py
"""

import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from diagram_engine import DiagramSession, EngineConfig, InMemoryEditor, format_xml

FLOWCHART = """<root>
  <mxCell id="0"/>
  <mxCell id="1" parent="0"/>
  <mxCell id="2" value="Start" style="ellipse;" vertex="1" parent="1">
    <mxGeometry x="40" y="40" width="120" height="60" as="geometry"/>
  </mxCell>
</root>"""


async def main() -> None:
    editor = InMemoryEditor(export_delay=0.05)
    session = DiagramSession(editor=editor, config=EngineConfig(export_timeout_seconds=2.0))

    print("=" * 60)
    print("display_diagram")
    print("=" * 60)
    result = await session.dispatch("call_1", "display_diagram", {"xml": FLOWCHART})
    print(result.content)
    print(format_xml(editor.document))

    print("\n" + "=" * 60)
    print("edit_diagram")
    print("=" * 60)
    result = await session.dispatch("call_2", "edit_diagram", {
        "edits": [
            {"search": 'value="Start"', "replace": 'value="Begin"'},
            {"search": 'style="ellipse;"', "replace": 'style="ellipse;fillColor=#dae8fc;"'},
        ],
    })
    print(result.content)

    print("\n" + "=" * 60)
    print("edit_diagram (search text not present)")
    print("=" * 60)
    result = await session.dispatch("call_3", "edit_diagram", {
        "edits": [{"search": 'value="Missing"', "replace": 'value="x"'}],
    })
    print(result.content)

    print("\n" + "=" * 60)
    print("history")
    print("=" * 60)
    for entry in session.history.to_list():
        marker = "*" if entry["current"] else " "
        print(f" {marker} #{entry['index']} {entry['source']:<8} {entry['length']} chars")

    await session.restore(0)
    print("\nRestored #0:", 'value="Start"' in editor.document)


if __name__ == "__main__":
    asyncio.run(main())
