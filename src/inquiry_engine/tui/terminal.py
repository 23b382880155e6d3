"""
Terminal input streams.

The input multiplexer works against any object that follows the
:class:`InputStream` protocol. :class:`TerminalInput` is the real
implementation for a POSIX terminal: it reads the file descriptor through
the running asyncio loop and toggles raw mode with ``termios``.
"""

from __future__ import annotations

import asyncio
import codecs
import os
import sys
from collections.abc import Callable
from typing import Any, Protocol, TextIO

from inquiry_engine.logging import get_logger

logger = get_logger("tui.terminal")

DataListener = Callable[[str], None]


class InputStream(Protocol):
    """
    Minimal interface the input multiplexer needs from a stream.

    Streams that can switch to raw mode additionally expose
    ``set_raw_mode(enabled: bool)`` and ``isatty()``. An empty string
    delivered to listeners signals end of input.
    """

    def add_listener(self, listener: DataListener) -> None: ...

    def remove_listener(self, listener: DataListener) -> None: ...

    def resume(self) -> None: ...

    def pause(self) -> None: ...


def supports_raw_mode(stream: Any) -> bool:
    """Whether *stream* can be switched into raw (unbuffered, no-echo) mode."""
    if not callable(getattr(stream, "set_raw_mode", None)):
        return False
    isatty = getattr(stream, "isatty", None)
    if callable(isatty):
        try:
            return bool(isatty())
        except (OSError, ValueError):
            return False
    return True


class TerminalInput:
    """
    Raw-mode capable wrapper around a terminal file descriptor.

    Use :meth:`for_file` to get the shared wrapper for a file; the
    multiplexer keys its state by stream object, so two wrappers for the
    same descriptor would compete for the same bytes.
    """

    _instances: dict[int, TerminalInput] = {}

    def __init__(self, file: TextIO | None = None) -> None:
        self._file = file if file is not None else sys.stdin
        self._fd = self._file.fileno()
        self._listeners: list[DataListener] = []
        self._saved_attrs: list[Any] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._reading_file = False
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @classmethod
    def for_file(cls, file: TextIO | None = None) -> TerminalInput:
        """Return the shared wrapper for *file* (defaults to ``sys.stdin``)."""
        target = file if file is not None else sys.stdin
        fd = target.fileno()
        instance = cls._instances.get(fd)
        if instance is None:
            instance = cls(target)
            cls._instances[fd] = instance
        return instance

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    def isatty(self) -> bool:
        return os.isatty(self._fd)

    def set_raw_mode(self, enabled: bool) -> None:
        """
        Toggle raw mode.

        Raw mode turns off echo, canonical line editing and signal keys so
        that Ctrl+C arrives as ``\\x03``. Output post-processing stays on so
        ``\\n`` still returns the carriage.
        """
        if not self.isatty():
            return

        import termios

        if enabled:
            if self._saved_attrs is not None:
                return
            self._saved_attrs = termios.tcgetattr(self._fd)
            attrs = termios.tcgetattr(self._fd)
            attrs[0] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
            attrs[1] |= termios.OPOST | termios.ONLCR
            attrs[2] |= termios.CS8
            attrs[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
            attrs[6][termios.VMIN] = 1
            attrs[6][termios.VTIME] = 0
            termios.tcsetattr(self._fd, termios.TCSANOW, attrs)
        else:
            if self._saved_attrs is None:
                return
            termios.tcsetattr(self._fd, termios.TCSANOW, self._saved_attrs)
            self._saved_attrs = None

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: DataListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: DataListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Flow control
    # ------------------------------------------------------------------

    def resume(self) -> None:
        """Start delivering data. Must be called with a running loop."""
        if self._loop is not None:
            return
        loop = asyncio.get_running_loop()
        self._loop = loop
        try:
            loop.add_reader(self._fd, self._on_readable)
        except PermissionError:
            # Regular files cannot be polled; read them a chunk per loop pass
            logger.debug("fd %d is not pollable, reading it directly", self._fd)
            if not self._reading_file:
                self._reading_file = True
                loop.call_soon(self._read_file)

    def pause(self) -> None:
        """Stop delivering data."""
        if self._loop is None:
            return
        self._loop.remove_reader(self._fd)
        self._loop = None

    def _read_file(self) -> None:
        loop = self._loop
        if loop is None:
            self._reading_file = False
            return
        self._on_readable()
        loop.call_soon(self._read_file)

    def _on_readable(self) -> None:
        try:
            raw = os.read(self._fd, 1024)
        except BlockingIOError:
            return
        except OSError as e:
            logger.debug("Reading terminal input failed: %s", e)
            raw = b""

        if not raw:
            self.pause()
            self._emit("")
            return

        data = self._decoder.decode(raw)
        if data:
            self._emit(data)

    def _emit(self, data: str) -> None:
        for listener in list(self._listeners):
            listener(data)
