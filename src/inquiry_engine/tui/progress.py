"""Single-line progress bar."""

from __future__ import annotations

import sys
from typing import Literal, TextIO

from inquiry_engine.tui.ansi import FG, clear_line, hide_cursor, show_cursor, style

ProgressStatus = Literal["active", "complete", "error"]


class ProgressBar:
    """
    Progress bar for work with a known fraction done.

    Parameters
    ----------
    text:
        Label shown before the bar.
    width:
        Bar width in cells.
    show_percentage:
        Append the percentage after the bar.
    output:
        Writable text stream, defaults to ``sys.stdout``.
    """

    def __init__(
        self,
        text: str,
        width: int = 40,
        show_percentage: bool = True,
        output: TextIO | None = None,
    ) -> None:
        self._text = text
        self._width = width
        self._show_percentage = show_percentage
        self._output: TextIO = output or sys.stdout
        self._value = 0.0
        self._status: ProgressStatus = "active"
        self._running = False

    @property
    def value(self) -> float:
        return self._value

    @property
    def status(self) -> ProgressStatus:
        return self._status

    def start(self) -> ProgressBar:
        if self._running:
            return self
        self._running = True
        self._write(hide_cursor())
        self._render()
        return self

    def update(self, value: float, text: str | None = None) -> ProgressBar:
        """Set progress to *value*, clamped to ``[0, 1]``."""
        self._value = max(0.0, min(1.0, value))
        if text:
            self._text = text
        if self._running:
            self._render()
        return self

    def increment(self, amount: float = 0.1) -> ProgressBar:
        return self.update(self._value + amount)

    def complete(self, text: str | None = None) -> ProgressBar:
        self._value = 1.0
        return self._finish("complete", text)

    def fail(self, text: str | None = None) -> ProgressBar:
        return self._finish("error", text)

    def _finish(self, status: ProgressStatus, text: str | None) -> ProgressBar:
        self._status = status
        if text:
            self._text = text
        self._render()
        self._write(show_cursor() + "\n")
        self._running = False
        return self

    def render_line(self) -> str:
        """The current bar as a single styled line."""
        filled = round(self._value * self._width)
        empty = self._width - filled

        if self._status == "complete":
            bar = style("█" * self._width, fg=FG.GREEN)
            icon = style("✔", fg=FG.GREEN)
        elif self._status == "error":
            bar = style("█" * filled + "░" * empty, dim=True)
            icon = style("✖", fg=FG.RED)
        else:
            bar = style("█" * filled, fg=FG.CYAN) + style("░" * empty, dim=True)
            icon = style("◐", fg=FG.CYAN)

        line = f"{icon} {self._text} [{bar}]"
        if self._show_percentage:
            line += " " + style(f"{round(self._value * 100):>3}", fg=FG.WHITE) + "%"
        return line

    def _render(self) -> None:
        self._write("\r" + clear_line() + self.render_line())

    def _write(self, data: str) -> None:
        self._output.write(data)
        self._output.flush()
