"""Helpers for draw.io XML documents.

The engine treats documents as opaque text. These helpers only touch the
outer structure: wrapping a bare ``<root>`` fragment into a full graph model
and re-indenting exported XML. Attribute text is never re-serialized.
"""
from __future__ import annotations

import re

EMPTY_DIAGRAM = (
    '<mxGraphModel><root><mxCell id="0"/><mxCell id="1" parent="0"/></root></mxGraphModel>'
)

_ROOT_RE = re.compile(r"<root\b[^>]*/>|<root\b[^>]*>.*</root>", re.DOTALL)
_TAG_BOUNDARY_RE = re.compile(r">\s*<")


def is_root_fragment(xml: str) -> bool:
    """True if ``xml`` is just a ``<root>`` element, not a full document."""
    return re.match(r"<root[\s>/]", xml.lstrip()) is not None


def replace_root(base: str, fragment: str) -> str:
    """Swap the ``<root>`` element of ``base`` for ``fragment``.

    Keeps the surrounding ``<mxGraphModel>`` (grid, page size, ...) of the
    current document. Falls back to the empty diagram when ``base`` has no
    root element.
    """
    fragment = fragment.strip()
    match = _ROOT_RE.search(base)
    if match is None:
        return replace_root(EMPTY_DIAGRAM, fragment)
    return base[: match.start()] + fragment + base[match.end():]


def format_xml(xml: str, indent: str = "  ") -> str:
    """Put every tag on its own line, indented by nesting depth.

    Only whitespace between tags changes. Elements whose text content sits
    on one line (``<a>text</a>``) are kept together.
    """
    text = xml.strip()
    if not text:
        return text

    parts = _TAG_BOUNDARY_RE.split(text)
    last = len(parts) - 1
    lines: list[str] = []
    depth = 0
    for i, part in enumerate(parts):
        token = ("<" if i > 0 else "") + part + (">" if i < last else "")
        if token.startswith("</"):
            depth = max(depth - 1, 0)
            lines.append(indent * depth + token)
        elif token.startswith(("<?", "<!")) or token.endswith("/>") or "</" in token:
            lines.append(indent * depth + token)
        else:
            lines.append(indent * depth + token)
            depth += 1
    return "\n".join(lines)
