"""Tests for the spinner, progress bar and streaming text widgets."""

from __future__ import annotations

import asyncio

import pytest

from inquiry_engine.testing import CapturedOutput
from inquiry_engine.tui.ansi import show_cursor
from inquiry_engine.tui.progress import ProgressBar
from inquiry_engine.tui.spinner import SPINNER_STYLES, Spinner, create_spinner
from inquiry_engine.tui.stream import CURSOR_BLOCK, StreamingText


class TestSpinner:
    @pytest.mark.asyncio
    async def test_succeed(self, output: CapturedOutput) -> None:
        spinner = Spinner("Installing", output=output).start()
        assert spinner.is_running
        assert spinner.status == "spinning"

        spinner.succeed("Installed")

        assert not spinner.is_running
        assert spinner.status == "success"
        assert output.text.endswith("✔ Installed\n")
        assert output.raw.endswith(show_cursor() + "\n")

    @pytest.mark.asyncio
    async def test_animates_frames(self, output: CapturedOutput) -> None:
        spinner = Spinner("Working", frames="line", interval_ms=5, output=output).start()
        await asyncio.sleep(0.1)
        spinner.stop("info")

        for frame in SPINNER_STYLES["line"]:
            assert f"{frame} Working" in output.text
        assert output.text.endswith("ℹ Working\n")

    @pytest.mark.asyncio
    async def test_update_text(self, output: CapturedOutput) -> None:
        spinner = create_spinner("Step 1", output=output).start()
        spinner.text("Step 2")
        spinner.fail()

        assert spinner.status == "error"
        assert output.text.endswith("✖ Step 2\n")

    @pytest.mark.asyncio
    async def test_custom_frames_and_warn(self, output: CapturedOutput) -> None:
        spinner = Spinner("Check", frames=["*"], output=output).start()
        spinner.warn("Careful")

        assert "* Check" in output.text
        assert output.text.endswith("⚠ Careful\n")

    def test_stop_before_start_is_noop(self, output: CapturedOutput) -> None:
        spinner = Spinner("Idle", output=output)
        spinner.stop()

        assert output.raw == ""

    def test_bad_frames(self) -> None:
        with pytest.raises(KeyError):
            Spinner("x", frames="nope")
        with pytest.raises(ValueError):
            Spinner("x", frames=[])


class TestProgressBar:
    def test_render_line(self, output: CapturedOutput) -> None:
        bar = ProgressBar("Downloading", width=10, output=output)
        bar.update(0.5)

        assert bar.value == 0.5
        assert output.raw == ""

        bar.start()
        assert output.text.endswith("◐ Downloading [█████░░░░░]  50%")

    def test_clamps(self, output: CapturedOutput) -> None:
        bar = ProgressBar("x", output=output)

        assert bar.update(2).value == 1.0
        assert bar.update(-1).value == 0.0

    def test_increment_and_text(self, output: CapturedOutput) -> None:
        bar = ProgressBar("Step", width=4, output=output).start()
        bar.increment(0.25)
        bar.update(0.5, text="Halfway")

        assert output.text.endswith("◐ Halfway [██░░]  50%")

    def test_complete(self, output: CapturedOutput) -> None:
        bar = ProgressBar("Build", width=4, output=output).start()
        bar.complete("Built")

        assert bar.status == "complete"
        assert bar.value == 1.0
        assert output.text.endswith("✔ Built [████] 100%\n")

    def test_fail_without_percentage(self, output: CapturedOutput) -> None:
        bar = ProgressBar("Upload", width=4, show_percentage=False, output=output).start()
        bar.update(0.5)
        bar.fail()

        assert bar.status == "error"
        assert output.text.endswith("✖ Upload [██░░]\n")


class TestStreamingText:
    def test_content(self, output: CapturedOutput) -> None:
        stream = StreamingText(show_cursor=False, output=output)
        stream.append("hello\nwor")
        stream.append_line("ld")
        stream.append("!")

        assert stream.content == "hello\nworld\n!"

    def test_clear(self, output: CapturedOutput) -> None:
        stream = StreamingText(show_cursor=False, output=output)
        stream.append("text")
        stream.clear()

        assert stream.content == ""

    @pytest.mark.asyncio
    async def test_prefix_and_complete(self, output: CapturedOutput) -> None:
        stream = StreamingText(prefix="> ", show_cursor=False, output=output).start()
        stream.append("first\nsecond")
        stream.complete()

        assert output.text.endswith("> first\n  second\n")
        assert output.raw.endswith(show_cursor() + "\n")

    @pytest.mark.asyncio
    async def test_cursor_shown_while_streaming(self, output: CapturedOutput) -> None:
        stream = StreamingText(blink_ms=5, output=output).start()
        stream.append("abc")

        assert f"abc{CURSOR_BLOCK}" in output.text

        stream.complete()
        assert output.text.endswith("abc\n")
