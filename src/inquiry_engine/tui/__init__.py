"""
Terminal layer for the inquiry engine.

Provides the input multiplexer that shares one raw input stream between
sessions, the screen engine that drives reducer-style screens, the
selectable prompt screens, and tick-driven progress widgets.
"""
from __future__ import annotations

from inquiry_engine.tui.engine import UIEngine
from inquiry_engine.tui.events import (
    CharEvent,
    EventResult,
    KeyEvent,
    ScreenConfig,
    TickEvent,
    UIEvent,
)
from inquiry_engine.tui.keypress import KeypressSession, activate, attach, deactivate, destroy
from inquiry_engine.tui.keys import KEY_CODES, Key, parse_key
from inquiry_engine.tui.progress import ProgressBar
from inquiry_engine.tui.prompts import (
    autocomplete_prompt,
    checkbox_prompt,
    filter_options,
    fuzzy_match,
    list_prompt,
)
from inquiry_engine.tui.spinner import SPINNER_STYLES, Spinner, create_spinner
from inquiry_engine.tui.stream import StreamingText
from inquiry_engine.tui.terminal import InputStream, TerminalInput

__all__ = [
    # Input
    "InputStream",
    "TerminalInput",
    "KeypressSession",
    "attach",
    "activate",
    "deactivate",
    "destroy",
    # Keys
    "KEY_CODES",
    "Key",
    "parse_key",
    # Engine
    "UIEngine",
    "ScreenConfig",
    "EventResult",
    "UIEvent",
    "KeyEvent",
    "CharEvent",
    "TickEvent",
    # Prompts
    "list_prompt",
    "autocomplete_prompt",
    "checkbox_prompt",
    "filter_options",
    "fuzzy_match",
    # Widgets
    "Spinner",
    "SPINNER_STYLES",
    "create_spinner",
    "ProgressBar",
    "StreamingText",
]
