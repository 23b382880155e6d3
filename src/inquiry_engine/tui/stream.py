"""
Streaming text output with a blinking cursor, for output that arrives in
pieces (e.g. generated text).
"""

from __future__ import annotations

import asyncio
import sys
from typing import TextIO

from inquiry_engine.tui.ansi import FG, clear_line, clear_to_end, cursor_up, hide_cursor, show_cursor, style

CURSOR_BLOCK = "▋"


class StreamingText:
    """
    Incrementally rendered multi-line text.

    Parameters
    ----------
    prefix:
        Written before the first line; later lines are indented to match.
    show_cursor:
        Blink a block cursor after the text while streaming.
    blink_ms:
        Cursor blink interval.
    output:
        Writable text stream, defaults to ``sys.stdout``.
    """

    def __init__(
        self,
        prefix: str = "",
        show_cursor: bool = True,
        blink_ms: int = 530,
        output: TextIO | None = None,
    ) -> None:
        self._prefix = prefix
        self._show_cursor = show_cursor
        self._blink = blink_ms / 1000
        self._output: TextIO = output or sys.stdout
        self._lines: list[str] = []
        self._current = ""
        self._complete = False
        self._cursor_visible = True
        self._rendered_lines = 0
        self._task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def content(self) -> str:
        """Everything appended so far."""
        lines = list(self._lines)
        if self._current:
            lines.append(self._current)
        return "\n".join(lines)

    def start(self) -> StreamingText:
        if self._running:
            return self
        self._running = True
        self._write(hide_cursor())
        if self._show_cursor:
            self._task = asyncio.get_running_loop().create_task(self._blink_cursor())
        self._render()
        return self

    def append(self, text: str) -> StreamingText:
        for char in text:
            if char == "\n":
                self._lines.append(self._current)
                self._current = ""
            else:
                self._current += char
        if self._running:
            self._render()
        return self

    def append_line(self, line: str) -> StreamingText:
        self._lines.append(self._current + line)
        self._current = ""
        if self._running:
            self._render()
        return self

    def clear(self) -> StreamingText:
        self._lines = []
        self._current = ""
        if self._running:
            self._render()
        return self

    def complete(self) -> StreamingText:
        """Stop the cursor and leave the text on screen."""
        self._complete = True
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self._cursor_visible = False
        self._render()
        self._write(show_cursor() + "\n")
        self._running = False
        return self

    async def _blink_cursor(self) -> None:
        while self._running and not self._complete:
            await asyncio.sleep(self._blink)
            self._cursor_visible = not self._cursor_visible
            self._render()

    def _render(self) -> None:
        lines = list(self._lines)
        last = self._current
        if self._show_cursor and not self._complete:
            last += style(CURSOR_BLOCK, fg=FG.CYAN) if self._cursor_visible else " "
        if last or not lines:
            lines.append(last)

        indent = " " * len(self._prefix)
        lines = [(self._prefix if i == 0 else indent) + line for i, line in enumerate(lines)]

        data = ""
        if self._rendered_lines > 1:
            data += cursor_up(self._rendered_lines - 1)
        data += "\r" + clear_to_end()
        data += "\n".join(clear_line() + line for line in lines)
        self._rendered_lines = len(lines)
        self._write(data)

    def _write(self, data: str) -> None:
        self._output.write(data)
        self._output.flush()
