"""
Key parsing for terminal input.

Translates raw chunks read from a raw-mode stream into structured ``Key``
objects. Translation is an exact-match lookup over a closed set of named
keys; anything else that is a single printable character is a literal.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Key data model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Key:
    """
    Parsed representation of a single named key press.

    Attributes
    ----------
    name:
        Symbolic name (e.g. ``'enter'``, ``'up'``, ``'ctrl+c'``).
    char:
        The literal character the key produces, if any.
    """

    name: str
    char: str = ""


# ---------------------------------------------------------------------------
# Raw sequences
# ---------------------------------------------------------------------------

class KEY_CODES:
    """Raw sequences a terminal in raw mode sends for the named keys."""

    UP_ARROW = "\x1b[A"
    DOWN_ARROW = "\x1b[B"
    RIGHT_ARROW = "\x1b[C"
    LEFT_ARROW = "\x1b[D"
    ENTER = "\r"
    SPACE = " "
    CTRL_C = "\x03"
    BACKSPACE = "\x7f"
    BACKSPACE_LEGACY = "\x08"
    ESCAPE = "\x1b"
    TAB = "\t"


# ---------------------------------------------------------------------------
# Common key constants
# ---------------------------------------------------------------------------

KEY_UP = Key(name="up")
KEY_DOWN = Key(name="down")
KEY_LEFT = Key(name="left")
KEY_RIGHT = Key(name="right")
KEY_ENTER = Key(name="enter", char="\r")
KEY_SPACE = Key(name="space", char=" ")
KEY_BACKSPACE = Key(name="backspace")
KEY_ESCAPE = Key(name="escape")
KEY_TAB = Key(name="tab", char="\t")
KEY_CTRL_C = Key(name="ctrl+c", char="c")

KEY_MAP: dict[str, Key] = {
    KEY_CODES.UP_ARROW: KEY_UP,
    KEY_CODES.DOWN_ARROW: KEY_DOWN,
    KEY_CODES.LEFT_ARROW: KEY_LEFT,
    KEY_CODES.RIGHT_ARROW: KEY_RIGHT,
    KEY_CODES.ENTER: KEY_ENTER,
    KEY_CODES.SPACE: KEY_SPACE,
    KEY_CODES.BACKSPACE: KEY_BACKSPACE,
    KEY_CODES.BACKSPACE_LEGACY: KEY_BACKSPACE,
    KEY_CODES.ESCAPE: KEY_ESCAPE,
    KEY_CODES.TAB: KEY_TAB,
    KEY_CODES.CTRL_C: KEY_CTRL_C,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_key(data: str) -> Key | None:
    """
    Look up *data* in the named key table.

    Returns ``None`` when the chunk is not exactly one of the known
    sequences; multi-key chunks are never split.
    """
    return KEY_MAP.get(data)


def is_literal_char(data: str) -> bool:
    """Whether *data* is a single printable character with no key name."""
    return len(data) == 1 and data.isprintable() and data not in KEY_MAP
