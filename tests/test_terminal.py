"""Tests for the real terminal input stream."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from inquiry_engine.tui.terminal import TerminalInput, supports_raw_mode


async def _until_ended(received: list[str]) -> None:
    for _ in range(200):
        if received and received[-1] == "":
            return
        await asyncio.sleep(0.005)


class TestRegularFileInput:
    @pytest.mark.asyncio
    async def test_file_is_read_to_end(self, tmp_path: Path) -> None:
        path = tmp_path / "answers.txt"
        path.write_text("first\nsecond\n")

        with path.open() as f:
            stream = TerminalInput(f)
            received: list[str] = []
            stream.add_listener(received.append)
            stream.resume()
            await _until_ended(received)
            stream.pause()

        assert "".join(received) == "first\nsecond\n"
        assert received[-1] == ""

    @pytest.mark.asyncio
    async def test_resume_after_pause_continues(self, tmp_path: Path) -> None:
        path = tmp_path / "answers.txt"
        path.write_text("x" * 3000)

        with path.open() as f:
            stream = TerminalInput(f)
            received: list[str] = []
            stream.add_listener(received.append)
            stream.resume()
            stream.pause()
            stream.resume()
            await _until_ended(received)

        assert "".join(received) == "x" * 3000

    def test_not_raw_capable(self, tmp_path: Path) -> None:
        path = tmp_path / "answers.txt"
        path.write_text("")

        with path.open() as f:
            stream = TerminalInput(f)
            assert not stream.isatty()
            assert not supports_raw_mode(stream)
