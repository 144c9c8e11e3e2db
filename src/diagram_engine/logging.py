"""
Logging setup for the diagram engine.

Every module logs through a child of the ``diagram_engine`` logger. The CLI
and the web server call ``setup_logging`` once at startup; library users can
leave it alone and attach their own handlers instead.
"""

from __future__ import annotations

import logging
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "diagram_engine"
PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_package_logger = logging.getLogger(PACKAGE_LOGGER)


def resolve_level(level: str | int) -> int:
    """Turn a level name ("debug", "WARNING") or number into a number.

    Unknown names resolve to INFO.
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(
    level: str | int = "INFO",
    *,
    stream: TextIO | None = None,
    file: str | None = None,
    rich: bool = False,
) -> logging.Logger:
    """
    Configure the ``diagram_engine`` logger tree.

    Replaces handlers installed by an earlier call, so it is safe to call
    again (e.g. once the config file has been read).

    Args:
        level: Level name or number
        stream: Plain-text output stream (defaults to stderr)
        file: Also append plain-text records to this file
        rich: Render console records through rich instead of plain text

    Example:
        setup_logging("DEBUG", rich=True)
        setup_logging(config.log_level, file="diagram-engine.log")
    """
    resolved = resolve_level(level)
    _package_logger.setLevel(resolved)
    for handler in list(_package_logger.handlers):
        _package_logger.removeHandler(handler)
        handler.close()

    console_handler: logging.Handler
    if rich:
        console_handler = RichHandler(
            console=Console(file=stream, stderr=stream is None),
            show_path=False,
            markup=False,
        )
        console_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    else:
        console_handler = logging.StreamHandler(stream)
        console_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    _package_logger.addHandler(console_handler)

    if file:
        file_handler = logging.FileHandler(file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        _package_logger.addHandler(file_handler)

    return _package_logger


def get_logger(name: str) -> logging.Logger:
    """Child logger of the package, e.g. ``get_logger("bridge")``."""
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
