"""
Screen engine event and configuration types.

A screen is a reducer: ``on_event(event, state)`` returns an
:class:`EventResult` with the next state and, once finished, ``done=True``
and the value the screen resolves to.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from inquiry_engine.tui.keys import Key, is_literal_char, parse_key

S = TypeVar("S")


@dataclass(frozen=True)
class KeyEvent:
    """A named key was pressed."""

    key: Key
    type: str = "key"


@dataclass(frozen=True)
class CharEvent:
    """A literal printable character was typed."""

    char: str
    type: str = "char"


@dataclass(frozen=True)
class TickEvent:
    """Periodic timer event for animation."""

    type: str = "tick"


UIEvent = Union[KeyEvent, CharEvent, TickEvent]


@dataclass
class EventResult(Generic[S]):
    """Outcome of handling one event."""

    state: S
    done: bool = False
    value: Any = None


@dataclass
class ScreenConfig(Generic[S]):
    """
    Configuration for one screen run.

    Attributes
    ----------
    initial_state:
        State handed to the first ``render`` call.
    render:
        Pure function returning the lines to display for a state.
    on_event:
        Reducer called for every key, character and tick event.
    on_start:
        Called once with the initial state before the first render.
    on_exit:
        Called exactly once with the final state and value on teardown.
    hide_cursor:
        Hide the terminal cursor while the screen runs.
    tick_interval_ms:
        Emit a :class:`TickEvent` this often; ``0`` disables ticks.
    """

    initial_state: S
    render: Callable[[S], list[str]]
    on_event: Callable[[UIEvent, S], EventResult[S]]
    on_start: Callable[[S], None] | None = None
    on_exit: Callable[[S, Any], None] | None = None
    hide_cursor: bool = False
    tick_interval_ms: int = 0


def event_for_chunk(data: str) -> UIEvent | None:
    """Translate a raw chunk into a key or character event, if it is one."""
    key = parse_key(data)
    if key is not None:
        return KeyEvent(key=key)
    if is_literal_char(data):
        return CharEvent(char=data)
    return None
