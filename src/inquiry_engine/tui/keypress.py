"""
Input multiplexer.

Several logical sessions may share one physical input stream. Sessions are
stacked per stream: only the session on top of the stack receives key
chunks, and the stream sits in raw mode exactly while the stack is
non-empty. With an empty stack the stream is in cooked mode and data is
buffered into lines for :meth:`KeypressSession.read_line`.

Example:
    from inquiry_engine.tui import keypress

    session = keypress.attach(stream)
    session.on(KEY_CODES.ENTER, on_enter)
    keypress.activate(session)
    ...
    keypress.deactivate(session)
    keypress.destroy(session)
"""

from __future__ import annotations

import asyncio
import sys
import weakref
from collections import deque
from collections.abc import Callable
from typing import Any

from inquiry_engine.logging import get_logger
from inquiry_engine.tui.keys import KEY_CODES
from inquiry_engine.tui.terminal import InputStream, supports_raw_mode

logger = get_logger("tui.keypress")

KeyHandler = Callable[[], None]
FallbackHandler = Callable[[str], None]
ExitProcess = Callable[[int], Any]


class _SharedInputState:
    """Everything the sessions of one stream share."""

    __slots__ = (
        "listener",
        "sessions",
        "active_stack",
        "raw_mode_set",
        "line_buffer",
        "line_waiters",
        "ended",
    )

    def __init__(self, listener: Callable[[str], None]) -> None:
        self.listener = listener
        self.sessions: list[KeypressSession] = []
        self.active_stack: list[KeypressSession] = []
        self.raw_mode_set = False
        self.line_buffer = ""
        self.line_waiters: deque[asyncio.Future[str]] = deque()
        self.ended = False

    @property
    def owner(self) -> KeypressSession | None:
        return self.active_stack[-1] if self.active_stack else None


_shared_states: weakref.WeakKeyDictionary[Any, _SharedInputState] = weakref.WeakKeyDictionary()


def _state_for(stream: InputStream) -> _SharedInputState:
    state = _shared_states.get(stream)
    if state is None:
        # The listener must not keep the stream alive through a strong
        # reference, or the weak mapping could never release it.
        stream_ref = weakref.ref(stream)

        def listener(data: str) -> None:
            target = stream_ref()
            if target is not None:
                _dispatch(target, data)

        state = _SharedInputState(listener)
        _shared_states[stream] = state
        stream.add_listener(listener)
        logger.debug("Installed shared listener for %r", stream)
    return state


def _set_raw_mode(stream: InputStream, state: _SharedInputState, enabled: bool) -> None:
    if state.raw_mode_set == enabled:
        return
    if not supports_raw_mode(stream):
        return
    try:
        stream.set_raw_mode(enabled)  # type: ignore[attr-defined]
    except OSError as e:
        logger.debug("Could not change raw mode on %r: %s", stream, e)
        return
    state.raw_mode_set = enabled


def _dispatch(stream: InputStream, data: str) -> None:
    state = _shared_states.get(stream)
    if state is None:
        return

    if data == "":
        _end_of_input(state)
        return

    owner = state.owner
    if owner is not None and state.raw_mode_set:
        owner.handle_key(data)
    elif data != KEY_CODES.CTRL_C:
        _feed_lines(state, data)

    if data == KEY_CODES.CTRL_C:
        _interrupt(stream, state, owner)


def _interrupt(stream: InputStream, state: _SharedInputState, owner: KeypressSession | None) -> None:
    session = owner or (state.sessions[0] if state.sessions else None)
    if session is None:
        return
    state.active_stack.clear()
    _set_raw_mode(stream, state, False)
    logger.debug("Interrupt received, exiting")
    session.exit_process(0)


def _feed_lines(state: _SharedInputState, data: str) -> None:
    state.line_buffer += data.replace("\r\n", "\n").replace("\r", "\n")
    while "\n" in state.line_buffer and state.line_waiters:
        line, state.line_buffer = state.line_buffer.split("\n", 1)
        waiter = state.line_waiters.popleft()
        if not waiter.done():
            waiter.set_result(line)


def _end_of_input(state: _SharedInputState) -> None:
    state.ended = True
    while state.line_waiters:
        waiter = state.line_waiters.popleft()
        if waiter.done():
            continue
        if state.line_buffer:
            waiter.set_result(state.line_buffer)
            state.line_buffer = ""
        else:
            waiter.set_exception(EOFError("End of input"))


class KeypressSession:
    """
    One logical consumer of an input stream.

    Handlers are registered per raw chunk with :meth:`on` and only fire
    while this session is on top of its stream's stack.

    Args:
        stream: The shared input stream.
        no_tty: Treat the stream as non-interactive; no raw mode is set.
        exit_process: Called with exit code ``0`` on Ctrl+C. Defaults to
            ``sys.exit``.
    """

    def __init__(
        self,
        stream: InputStream,
        no_tty: bool = False,
        exit_process: ExitProcess | None = None,
    ) -> None:
        self._stream = stream
        self._no_tty = no_tty
        self._exit_process = exit_process or sys.exit
        self._handlers: dict[str, list[KeyHandler]] = {}
        self._fallback: FallbackHandler | None = None
        self._destroyed = False
        _state_for(stream).sessions.append(self)

    @property
    def stream(self) -> InputStream:
        return self._stream

    @property
    def no_tty(self) -> bool:
        return self._no_tty

    @property
    def supports_raw_mode(self) -> bool:
        """Whether key events can reach this session at all."""
        return not self._no_tty and supports_raw_mode(self._stream)

    @property
    def is_active(self) -> bool:
        """Whether this session currently owns the stream."""
        state = _shared_states.get(self._stream)
        return state is not None and state.owner is self

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on(self, code: str, handler: KeyHandler) -> None:
        """Call *handler* whenever the raw chunk *code* arrives."""
        self._handlers.setdefault(code, []).append(handler)

    def off(self, code: str, handler: KeyHandler) -> None:
        """Remove a handler registered with :meth:`on`."""
        handlers = self._handlers.get(code)
        if not handlers or handler not in handlers:
            return
        handlers.remove(handler)
        if not handlers:
            del self._handlers[code]

    def on_unmatched(self, handler: FallbackHandler | None) -> None:
        """
        Receive every chunk that has no handler registered with :meth:`on`.

        The chunk is passed to *handler*. Only one fallback is kept; ``None``
        removes it.
        """
        self._fallback = handler

    def clear_handlers(self) -> None:
        self._handlers.clear()
        self._fallback = None

    def handle_key(self, data: str) -> None:
        handlers = self._handlers.get(data)
        if handlers:
            for handler in list(handlers):
                handler()
        elif self._fallback is not None:
            self._fallback(data)

    def exit_process(self, code: int = 0) -> None:
        self._exit_process(code)

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    def activate(self) -> None:
        """Put this session on top of the stack and enter raw mode."""
        if self._destroyed:
            raise RuntimeError("Cannot activate a destroyed session")
        state = _state_for(self._stream)
        if self in state.active_stack:
            state.active_stack.remove(self)
        state.active_stack.append(self)
        logger.debug("Session activated (stack depth %d)", len(state.active_stack))

        if not self._no_tty:
            _set_raw_mode(self._stream, state, True)
        self._stream.resume()

    def deactivate(self) -> None:
        """Remove this session from the stack, wherever it sits."""
        state = _shared_states.get(self._stream)
        if state is None or self not in state.active_stack:
            return
        state.active_stack.remove(self)
        logger.debug("Session deactivated (stack depth %d)", len(state.active_stack))
        if not state.active_stack:
            _set_raw_mode(self._stream, state, False)

    def destroy(self) -> None:
        """Unregister permanently; the last session releases the stream."""
        if self._destroyed:
            return
        self.deactivate()
        self._destroyed = True
        self._handlers.clear()

        state = _shared_states.get(self._stream)
        if state is None:
            return
        if self in state.sessions:
            state.sessions.remove(self)
        if state.sessions:
            return

        self._stream.remove_listener(state.listener)
        _set_raw_mode(self._stream, state, False)
        self._stream.pause()
        for waiter in state.line_waiters:
            waiter.cancel()
        del _shared_states[self._stream]
        logger.debug("Released shared listener for %r", self._stream)

    # ------------------------------------------------------------------
    # Line input
    # ------------------------------------------------------------------

    async def read_line(self) -> str:
        """
        Wait for one line of cooked input, without its line terminator.

        Raises:
            EOFError: If the stream ended before a full line arrived.
        """
        state = _state_for(self._stream)
        if "\n" in state.line_buffer:
            line, state.line_buffer = state.line_buffer.split("\n", 1)
            return line
        if state.ended:
            if state.line_buffer:
                line, state.line_buffer = state.line_buffer, ""
                return line
            raise EOFError("End of input")

        waiter: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        state.line_waiters.append(waiter)
        self._stream.resume()
        return await waiter


# ---------------------------------------------------------------------------
# Module-level API
# ---------------------------------------------------------------------------

def attach(
    stream: InputStream,
    no_tty: bool = False,
    exit_process: ExitProcess | None = None,
) -> KeypressSession:
    """Register a new session on *stream*."""
    return KeypressSession(stream, no_tty=no_tty, exit_process=exit_process)


def activate(session: KeypressSession) -> None:
    session.activate()


def deactivate(session: KeypressSession) -> None:
    session.deactivate()


def destroy(session: KeypressSession) -> None:
    session.destroy()


def active_session(stream: InputStream) -> KeypressSession | None:
    """The session currently receiving keys from *stream*, if any."""
    state = _shared_states.get(stream)
    return state.owner if state is not None else None


def is_raw_mode(stream: InputStream) -> bool:
    """Whether the multiplexer has put *stream* into raw mode."""
    state = _shared_states.get(stream)
    return state is not None and state.raw_mode_set
