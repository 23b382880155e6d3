"""
Logging for the inquiry engine.

Every module logs through a child of the ``inquiry_engine`` logger. Records
never reach the prompt output stream: until :func:`setup_logging` is called
they are dropped, afterwards they go to stderr (or a file) so a prompt being
painted on stdout is not disturbed.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

PACKAGE_LOGGER = "inquiry_engine"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_root_logger = logging.getLogger(PACKAGE_LOGGER)
_root_logger.addHandler(logging.NullHandler())
_saved_level = logging.NOTSET


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(
    level: str | int = "INFO",
    format: str | None = None,
    stream: TextIO | None = None,
    file: str | None = None,
) -> None:
    """
    Route inquiry engine logs to stderr and optionally a file.

    Calling it again replaces the previous handlers.

    Args:
        level: Level name (DEBUG, INFO, ...) or number; unknown names mean INFO
        format: Record format, ``DEFAULT_FORMAT`` when omitted
        stream: Stream for the console handler (defaults to stderr)
        file: Optional path of a log file

    Example:
        from inquiry_engine.logging import setup_logging

        # Trace session stack changes and resolver failures
        setup_logging("DEBUG", file="prompts.log")
    """
    level = _coerce_level(level)
    formatter = logging.Formatter(format or DEFAULT_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if file:
        handlers.append(logging.FileHandler(file))

    _root_logger.handlers.clear()
    _root_logger.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        _root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """
    Return the logger for a submodule such as ``"tui.keypress"``.

    Fully qualified names are accepted unchanged.
    """
    if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


def set_level(level: str | int) -> None:
    """Change the package level without touching handlers."""
    _root_logger.setLevel(_coerce_level(level))


def disable() -> None:
    """Silence the package and every submodule logger until :func:`enable`."""
    global _saved_level
    if not _root_logger.disabled:
        _saved_level = _root_logger.level
        _root_logger.disabled = True
        # Child records bypass the disabled flag but honour the inherited level.
        _root_logger.setLevel(logging.CRITICAL + 1)


def enable() -> None:
    if _root_logger.disabled:
        _root_logger.disabled = False
        _root_logger.setLevel(_saved_level)
