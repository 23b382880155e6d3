"""
Test helpers for code that prompts.

``ScriptedInput`` is a fake raw-mode capable input stream. Keys and lines
queued with :meth:`ScriptedInput.send_key` / :meth:`ScriptedInput.send_line`
are delivered in order, each one once the stream is ready for it: keys
while the stream is in raw mode, lines while it is in cooked mode.
``CapturedOutput`` collects everything written to it.

Example:
    stream = ScriptedInput()
    output = CapturedOutput()
    prompter = Prompter(input=stream, output=output)

    stream.send_key(KEY_SEQUENCES.DOWN_ARROW, KEY_SEQUENCES.ENTER)
    answers = await prompter.prompt({}, questions)
"""

from __future__ import annotations

import asyncio
import io
from collections import deque
from collections.abc import Callable

from inquiry_engine.logging import get_logger
from inquiry_engine.tui.ansi import strip_ansi

logger = get_logger("testing")

__all__ = [
    "KEY_SEQUENCES",
    "CapturedOutput",
    "ScriptedInput",
    "humanize_key_sequences",
    "strip_ansi",
]


class KEY_SEQUENCES:
    """Raw sequences terminals send for common keys."""

    ENTER = "\r"
    UP_ARROW = "\x1b[A"
    DOWN_ARROW = "\x1b[B"
    RIGHT_ARROW = "\x1b[C"
    LEFT_ARROW = "\x1b[D"
    SPACE = " "
    TAB = "\t"
    ESCAPE = "\x1b"
    BACKSPACE = "\x7f"
    DELETE = "\x1b[3~"
    CTRL_C = "\x03"
    CTRL_D = "\x04"


# Longer sequences first so arrows are not split. A bare ESC is left alone
# because it starts every ANSI styling sequence.
_HUMANIZED = [
    ("\x1b[3~", "<DELETE>"),
    ("\x1b[A", "<UP_ARROW>"),
    ("\x1b[B", "<DOWN_ARROW>"),
    ("\x1b[C", "<RIGHT_ARROW>"),
    ("\x1b[D", "<LEFT_ARROW>"),
    ("\r", "<ENTER>"),
    ("\x7f", "<BACKSPACE>"),
    ("\x03", "<CTRL_C>"),
    ("\x04", "<CTRL_D>"),
    ("\t", "<TAB>"),
    (" ", "<SPACE>"),
]


def humanize_key_sequences(data: str) -> str:
    """Replace key sequences in *data* with ``<NAME>`` markers."""
    for seq, name in _HUMANIZED:
        data = data.replace(seq, name)
    return data


class ScriptedInput:
    """
    Fake input stream driven by a script.

    Args:
        tty: Report as a terminal. A non-tty stream never enters raw mode,
            so only line input reaches sessions.
        delay: Seconds between delivery attempts.
        patience: Deliver the next item anyway after waiting this long for
            the stream to become ready.
    """

    def __init__(self, tty: bool = True, delay: float = 0.005, patience: float = 1.0) -> None:
        self._tty = tty
        self._delay = delay
        self._patience = patience
        self._listeners: list[Callable[[str], None]] = []
        self._script: deque[tuple[str, str]] = deque()
        self._pump: asyncio.Task[None] | None = None
        self.raw_mode = False
        self.raw_mode_history: list[bool] = []
        self.paused = True
        self.written: list[str] = []

    # ------------------------------------------------------------------
    # Stream interface
    # ------------------------------------------------------------------

    def isatty(self) -> bool:
        return self._tty

    def set_raw_mode(self, enabled: bool) -> None:
        self.raw_mode = enabled
        self.raw_mode_history.append(enabled)

    def add_listener(self, listener: Callable[[str], None]) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[str], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def resume(self) -> None:
        self.paused = False
        if self._script:
            self._ensure_pump()

    def pause(self) -> None:
        self.paused = True

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # ------------------------------------------------------------------
    # Scripting
    # ------------------------------------------------------------------

    def push(self, data: str) -> None:
        """Deliver *data* to listeners right now."""
        self.written.append(data)
        for listener in list(self._listeners):
            listener(data)

    def send_key(self, *keys: str) -> None:
        """Queue raw key chunks, one chunk per key."""
        for key in keys:
            self._script.append(("key", key))
        self._ensure_pump()

    def send_line(self, text: str) -> None:
        """Queue one line of cooked input."""
        self._script.append(("line", text + "\n"))
        self._ensure_pump()

    def end(self) -> None:
        """Queue end of input."""
        self._script.append(("end", ""))
        self._ensure_pump()

    @property
    def pending(self) -> int:
        return len(self._script)

    async def drain(self) -> None:
        """Wait until every queued item has been delivered."""
        while self._pump is not None and not self._pump.done():
            await asyncio.sleep(self._delay)

    def _ensure_pump(self) -> None:
        if self._pump is not None and not self._pump.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._pump = loop.create_task(self._run_script())

    def _ready_for(self, kind: str) -> bool:
        if kind == "key":
            return self.raw_mode or not self._tty
        if kind == "line":
            return not self.raw_mode
        return True

    async def _run_script(self) -> None:
        waited = 0.0
        while self._script:
            await asyncio.sleep(self._delay)
            kind, data = self._script[0]
            if not self._ready_for(kind) and waited < self._patience:
                waited += self._delay
                continue
            if waited >= self._patience:
                logger.debug("Delivering %r before the stream was ready", data)
            waited = 0.0
            self._script.popleft()
            self.push(data)


class CapturedOutput(io.StringIO):
    """A text stream that keeps everything written to it."""

    def isatty(self) -> bool:
        return False

    @property
    def raw(self) -> str:
        return self.getvalue()

    @property
    def text(self) -> str:
        """Output with ANSI sequences removed."""
        return strip_ansi(self.getvalue())

    @property
    def humanized(self) -> str:
        """Output with key sequences named and ANSI sequences removed."""
        return strip_ansi(humanize_key_sequences(self.getvalue()))

    def clear(self) -> None:
        self.seek(0)
        self.truncate(0)
