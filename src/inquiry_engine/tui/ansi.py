"""
Escape sequences used to paint prompts.

Screens are repainted relative to where the previous frame ended, so only
upward cursor motion and line erasure are needed. Nothing here addresses
absolute positions except the full-screen clear used on exit.
"""

from __future__ import annotations

import re

CSI = "\033["
RESET = f"{CSI}0m"

_ANSI_PATTERN = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]|\x1b[@-Z\\-_]")


class FG:
    """Foreground colors used by prompt headers, markers and annotations."""

    RED = f"{CSI}31m"
    GREEN = f"{CSI}32m"
    YELLOW = f"{CSI}33m"
    BLUE = f"{CSI}34m"
    CYAN = f"{CSI}36m"
    WHITE = f"{CSI}37m"
    GRAY = f"{CSI}90m"
    BRIGHT_WHITE = f"{CSI}97m"


def style(text: str, *, fg: str | None = None, bold: bool = False, dim: bool = False) -> str:
    """
    Wrap *text* in color and weight sequences.

    ``fg`` is one of the :class:`FG` sequences. Unstyled text is returned
    unchanged so plain output carries no stray resets.
    """
    prefix = fg or ""
    if bold:
        prefix += f"{CSI}1m"
    if dim:
        prefix += f"{CSI}2m"
    return f"{prefix}{text}{RESET}" if prefix else text


def strip_ansi(text: str) -> str:
    """Remove every escape sequence from *text*."""
    return _ANSI_PATTERN.sub("", text)


def cursor_up(n: int = 1) -> str:
    return f"{CSI}{n}A"


def clear_line() -> str:
    return f"{CSI}2K"


def clear_to_end() -> str:
    """Erase from the cursor to the bottom of the screen."""
    return f"{CSI}0J"


def clear_screen() -> str:
    """Erase the screen and home the cursor."""
    return f"{CSI}2J{CSI}H"


def hide_cursor() -> str:
    return f"{CSI}?25l"


def show_cursor() -> str:
    return f"{CSI}?25h"
