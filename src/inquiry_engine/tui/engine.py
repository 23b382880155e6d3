"""
Screen engine.

``UIEngine`` runs one screen at a time: it renders the lines a screen's
``render`` function returns, feeds key, character and tick events through
the screen's reducer, and repaints after every state change using only
cursor-relative movement. A run resolves with the value of the first
``EventResult(done=True)``.
"""

from __future__ import annotations

import asyncio
import sys
from io import StringIO
from typing import Any, Generic, TextIO, TypeVar

from inquiry_engine.logging import get_logger
from inquiry_engine.tui import keypress
from inquiry_engine.tui.ansi import clear_line, clear_screen, cursor_up, hide_cursor, show_cursor
from inquiry_engine.tui.events import ScreenConfig, TickEvent, UIEvent, event_for_chunk
from inquiry_engine.tui.keys import KEY_CODES
from inquiry_engine.tui.terminal import InputStream

logger = get_logger("tui.engine")

S = TypeVar("S")


class _Run(Generic[S]):
    """Bookkeeping for one ``UIEngine.run`` call."""

    def __init__(self, config: ScreenConfig[S], future: asyncio.Future[Any]) -> None:
        self.config = config
        self.state: S = config.initial_state
        self.future = future
        self.tick_task: asyncio.Task[None] | None = None
        self.finished = False


class UIEngine:
    """
    Event/render loop for interactive screens.

    Parameters
    ----------
    input:
        Shared input stream the engine attaches a session to.
    output:
        Writable text stream, defaults to ``sys.stdout``.
    no_tty:
        When true, :meth:`run` resolves to ``None`` without rendering.
    session:
        Reuse an existing multiplexer session. The engine never destroys a
        session it did not create.
    clear_screen_on_start:
        Clear the whole screen before the first render of each run.
    """

    def __init__(
        self,
        input: InputStream,
        output: TextIO | None = None,
        no_tty: bool = False,
        session: keypress.KeypressSession | None = None,
        clear_screen_on_start: bool = False,
    ) -> None:
        self._output: TextIO = output or sys.stdout
        self._no_tty = no_tty
        self._clear_screen_on_start = clear_screen_on_start
        self._owns_session = session is None
        self._session = session or keypress.attach(input, no_tty=no_tty)
        self._rendered_lines = 0
        self._run: _Run[Any] | None = None

    @property
    def session(self) -> keypress.KeypressSession:
        return self._session

    @property
    def rendered_lines(self) -> int:
        """Number of lines the last render left on screen."""
        return self._rendered_lines

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, config: ScreenConfig[S]) -> Any:
        """Run *config* until its reducer reports ``done``."""
        if self._no_tty or not self._session.supports_raw_mode:
            return None
        if self._run is not None:
            raise RuntimeError("UIEngine is already running a screen")

        loop = asyncio.get_running_loop()
        run: _Run[S] = _Run(config, loop.create_future())
        self._run = run
        self._rendered_lines = 0

        self._session.on_unmatched(self._chunk_handler(run))
        self._session.activate()

        if self._clear_screen_on_start:
            self._write(clear_screen())
        if config.hide_cursor:
            self._write(hide_cursor())
        if config.on_start is not None:
            config.on_start(run.state)
        self._render(run)

        if config.tick_interval_ms > 0:
            run.tick_task = loop.create_task(self._tick(run, config.tick_interval_ms / 1000))

        try:
            return await run.future
        finally:
            self._teardown(run, None)

    def destroy(self) -> None:
        """Tear down any running screen and release an owned session."""
        if self._run is not None:
            self._teardown(self._run, None)
        if self._owns_session:
            self._session.destroy()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _chunk_handler(self, run: _Run[Any]):
        def handler(data: str) -> None:
            if data == KEY_CODES.CTRL_C:
                self._teardown(run, None)
                return
            event = event_for_chunk(data)
            if event is not None:
                self._handle_event(run, event)

        return handler

    def _handle_event(self, run: _Run[Any], event: UIEvent) -> None:
        if run.finished:
            return
        result = run.config.on_event(event, run.state)
        run.state = result.state
        self._render(run)
        if result.done:
            self._teardown(run, result.value)

    async def _tick(self, run: _Run[Any], interval: float) -> None:
        while not run.finished:
            await asyncio.sleep(interval)
            self._handle_event(run, TickEvent())

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self, run: _Run[Any]) -> None:
        lines = run.config.render(run.state)
        buf = StringIO()

        if self._rendered_lines:
            buf.write(cursor_up(self._rendered_lines))
            buf.write("\r")

        for line in lines:
            buf.write(clear_line())
            buf.write(line)
            buf.write("\n")

        surplus = self._rendered_lines - len(lines)
        if surplus > 0:
            for _ in range(surplus):
                buf.write(clear_line())
                buf.write("\n")
            buf.write(cursor_up(surplus))

        self._rendered_lines = len(lines)
        self._write(buf.getvalue())

    def _write(self, data: str) -> None:
        self._output.write(data)
        self._output.flush()

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def _teardown(self, run: _Run[Any], value: Any) -> None:
        if run.finished:
            return
        run.finished = True

        if run.tick_task is not None:
            run.tick_task.cancel()
            run.tick_task = None

        self._session.clear_handlers()
        self._session.deactivate()
        if run.config.hide_cursor:
            self._write(show_cursor())
        if self._run is run:
            self._run = None

        try:
            if run.config.on_exit is not None:
                run.config.on_exit(run.state, value)
        finally:
            if not run.future.done():
                run.future.set_result(value)
