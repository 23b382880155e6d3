"""
Single-line animated spinner.

Example:
    spinner = Spinner("Installing dependencies").start()
    await install()
    spinner.succeed("Installed")
"""

from __future__ import annotations

import asyncio
import sys
from typing import Literal, TextIO

from inquiry_engine.tui.ansi import FG, clear_line, hide_cursor, show_cursor, style

SPINNER_STYLES: dict[str, list[str]] = {
    "dots": ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"],
    "line": ["-", "\\", "|", "/"],
    "arc": ["◜", "◠", "◝", "◞", "◡", "◟"],
    "circle": ["◐", "◓", "◑", "◒"],
    "square": ["◰", "◳", "◲", "◱"],
    "bounce": ["⠁", "⠂", "⠄", "⠂"],
    "arrow": ["←", "↖", "↑", "↗", "→", "↘", "↓", "↙"],
    "dots2": ["⣾", "⣽", "⣻", "⢿", "⡿", "⣟", "⣯", "⣷"],
}

SpinnerStatus = Literal["spinning", "success", "error", "warning", "info"]

_STATUS_ICONS: dict[str, tuple[str, str]] = {
    "success": ("✔", FG.GREEN),
    "error": ("✖", FG.RED),
    "warning": ("⚠", FG.YELLOW),
    "info": ("ℹ", FG.CYAN),
}


class Spinner:
    """
    Animated status line.

    Parameters
    ----------
    text:
        Message shown next to the spinner.
    frames:
        Animation frames; a key of :data:`SPINNER_STYLES` or a list.
    interval_ms:
        Delay between frames.
    output:
        Writable text stream, defaults to ``sys.stdout``.
    """

    def __init__(
        self,
        text: str,
        frames: str | list[str] = "dots",
        interval_ms: int = 80,
        output: TextIO | None = None,
    ) -> None:
        self._frames = SPINNER_STYLES[frames] if isinstance(frames, str) else list(frames)
        if not self._frames:
            raise ValueError("Spinner needs at least one frame")
        self._interval = interval_ms / 1000
        self._output: TextIO = output or sys.stdout
        self._text = text
        self._final_text: str | None = None
        self._frame = 0
        self._status: SpinnerStatus = "spinning"
        self._task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def status(self) -> SpinnerStatus:
        return self._status

    def start(self) -> Spinner:
        """Start animating. Must be called with a running loop."""
        if self._running:
            return self
        self._running = True
        self._status = "spinning"
        self._write(hide_cursor())
        self._render()
        self._task = asyncio.get_running_loop().create_task(self._animate())
        return self

    def text(self, text: str) -> Spinner:
        self._text = text
        if self._running:
            self._render()
        return self

    def succeed(self, text: str | None = None) -> Spinner:
        return self.stop("success", text)

    def fail(self, text: str | None = None) -> Spinner:
        return self.stop("error", text)

    def warn(self, text: str | None = None) -> Spinner:
        return self.stop("warning", text)

    def info(self, text: str | None = None) -> Spinner:
        return self.stop("info", text)

    def stop(self, status: SpinnerStatus = "success", text: str | None = None) -> Spinner:
        """Freeze the line with a status icon and restore the cursor."""
        if not self._running:
            return self
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self._status = status
        if text:
            self._final_text = text
        self._render()
        self._write(show_cursor() + "\n")
        self._running = False
        return self

    async def _animate(self) -> None:
        while self._running:
            await asyncio.sleep(self._interval)
            self._frame = (self._frame + 1) % len(self._frames)
            self._render()

    def _render(self) -> None:
        message = self._final_text or self._text
        if self._status == "spinning":
            line = f"{style(self._frames[self._frame], fg=FG.CYAN)} {message}"
        else:
            icon, color = _STATUS_ICONS[self._status]
            line = f"{style(icon, fg=color)} {style(message, fg=color)}"
        self._write("\r" + clear_line() + line)

    def _write(self, data: str) -> None:
        self._output.write(data)
        self._output.flush()


def create_spinner(text: str, **kwargs) -> Spinner:
    return Spinner(text, **kwargs)
