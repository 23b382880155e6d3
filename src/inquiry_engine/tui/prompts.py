"""
Selectable prompt screens: list, autocomplete and checkbox.

Each prompt is a pure reducer plus a render function over a small state
dataclass, run by :class:`~inquiry_engine.tui.engine.UIEngine`. The
reducers are importable on their own so they can be tested without a
terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, TextIO

from inquiry_engine.errors import EmptyOptionsError
from inquiry_engine.question import OptionValue
from inquiry_engine.tui.ansi import FG, style
from inquiry_engine.tui.engine import UIEngine
from inquiry_engine.tui.events import CharEvent, EventResult, KeyEvent, ScreenConfig, UIEvent
from inquiry_engine.tui.keypress import KeypressSession

CHECKED = "◉"
UNCHECKED = "○"
NO_OPTIONS = "No options"


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def fuzzy_match(option: str, text: str) -> bool:
    """
    Whether the characters of *text* appear in *option* in order.

    Empty or whitespace-only input matches everything.
    """
    if not text or not text.strip():
        return True
    position = 0
    for char in option:
        if char == text[position]:
            position += 1
            if position == len(text):
                return True
    return False


def filter_options(options: list[OptionValue], text: str) -> list[OptionValue]:
    """Case-insensitive subsequence filter, sorted by option name."""
    needle = text.lower()
    matches = [option for option in options if fuzzy_match(option.name.lower(), needle)]
    return sorted(matches, key=lambda option: option.name)


# ---------------------------------------------------------------------------
# Navigation helpers
# ---------------------------------------------------------------------------

def _move_up(selected: int, start: int, count: int, max_lines: int) -> tuple[int, int]:
    selected = selected - 1 if selected > 0 else count - 1
    if selected < start:
        start = selected
    elif selected == count - 1:
        start = max(0, count - max_lines)
    return selected, start


def _move_down(selected: int, start: int, count: int, max_lines: int) -> tuple[int, int]:
    selected = (selected + 1) % count
    if selected >= start + max_lines:
        start = selected - max_lines + 1
    elif selected == 0:
        start = 0
    return selected, start


def _option_line(option: OptionValue, highlighted: bool) -> str:
    if highlighted:
        return style("> " + option.name, fg=FG.BLUE)
    return "  " + option.name


# ---------------------------------------------------------------------------
# List
# ---------------------------------------------------------------------------

@dataclass
class ListState:
    options: list[OptionValue]
    max_lines: int
    prompt_message: str = ""
    selected_index: int = 0
    start_index: int = 0


def list_render(state: ListState) -> list[str]:
    lines = state.prompt_message.splitlines()
    end = min(state.start_index + state.max_lines, len(state.options))
    for i in range(state.start_index, end):
        lines.append(_option_line(state.options[i], i == state.selected_index))
    return lines


def list_on_event(event: UIEvent, state: ListState) -> EventResult[ListState]:
    if not isinstance(event, KeyEvent) or not state.options:
        return EventResult(state)

    count = len(state.options)
    name = event.key.name
    if name == "up":
        selected, start = _move_up(state.selected_index, state.start_index, count, state.max_lines)
        return EventResult(replace(state, selected_index=selected, start_index=start))
    if name == "down":
        selected, start = _move_down(state.selected_index, state.start_index, count, state.max_lines)
        return EventResult(replace(state, selected_index=selected, start_index=start))
    if name == "enter":
        return EventResult(state, done=True, value=state.options[state.selected_index].value)
    return EventResult(state)


# ---------------------------------------------------------------------------
# Autocomplete
# ---------------------------------------------------------------------------

@dataclass
class AutocompleteState:
    options: list[OptionValue]
    max_lines: int
    prompt_message: str = ""
    allow_custom: bool = False
    filtered_options: list[OptionValue] = field(default_factory=list)
    input: str = ""
    selected_index: int = 0
    start_index: int = 0

    def __post_init__(self) -> None:
        if not self.filtered_options and not self.input:
            self.filtered_options = list(self.options)


def autocomplete_render(state: AutocompleteState) -> list[str]:
    lines = [*state.prompt_message.splitlines(), f"> {state.input}"]
    end = min(state.start_index + state.max_lines, len(state.filtered_options))
    for i in range(state.start_index, end):
        lines.append(_option_line(state.filtered_options[i], i == state.selected_index))
    if not state.filtered_options:
        lines.append(NO_OPTIONS)
    return lines


def _refilter_autocomplete(state: AutocompleteState, text: str) -> AutocompleteState:
    filtered = filter_options(state.options, text)
    selected, start = state.selected_index, state.start_index
    if selected < start:
        start = selected
    elif selected >= start + state.max_lines:
        start = selected - state.max_lines + 1
    if selected >= len(filtered):
        selected = max(len(filtered) - 1, 0)
    if start > max(0, len(filtered) - state.max_lines):
        start = max(0, len(filtered) - state.max_lines)
    return replace(state, input=text, filtered_options=filtered, selected_index=selected, start_index=start)


def autocomplete_on_event(event: UIEvent, state: AutocompleteState) -> EventResult[AutocompleteState]:
    if isinstance(event, CharEvent):
        return EventResult(_refilter_autocomplete(state, state.input + event.char))
    if not isinstance(event, KeyEvent):
        return EventResult(state)

    count = len(state.filtered_options)
    name = event.key.name
    if name == "up" and count:
        selected, start = _move_up(state.selected_index, state.start_index, count, state.max_lines)
        return EventResult(replace(state, selected_index=selected, start_index=start))
    if name == "down" and count:
        selected, start = _move_down(state.selected_index, state.start_index, count, state.max_lines)
        return EventResult(replace(state, selected_index=selected, start_index=start))
    if name == "backspace":
        return EventResult(_refilter_autocomplete(state, state.input[:-1]))
    if name == "space":
        return EventResult(_refilter_autocomplete(state, state.input + " "))
    if name == "enter":
        if count:
            return EventResult(state, done=True, value=state.filtered_options[state.selected_index].value)
        if state.allow_custom and state.input.strip():
            return EventResult(state, done=True, value=state.input)
    return EventResult(state)


# ---------------------------------------------------------------------------
# Checkbox
# ---------------------------------------------------------------------------

@dataclass
class CheckboxState:
    options: list[OptionValue]
    max_lines: int
    prompt_message: str = ""
    return_full_results: bool = False
    selections: list[bool] = field(default_factory=list)
    filtered_indices: list[int] = field(default_factory=list)
    input: str = ""
    selected_index: int = 0
    start_index: int = 0

    def __post_init__(self) -> None:
        if not self.selections:
            self.selections = [False] * len(self.options)
        if not self.filtered_indices and not self.input:
            self.filtered_indices = list(range(len(self.options)))


def checkbox_render(state: CheckboxState) -> list[str]:
    lines = [*state.prompt_message.splitlines(), f"> {state.input}"]
    end = min(state.start_index + state.max_lines, len(state.filtered_indices))
    for i in range(state.start_index, end):
        original = state.filtered_indices[i]
        highlighted = i == state.selected_index
        marker = ">" if highlighted else " "
        box = CHECKED if state.selections[original] else UNCHECKED
        line = f"{marker} {box} {state.options[original].name}"
        lines.append(style(line, fg=FG.BLUE) if highlighted else line)
    if not state.filtered_indices:
        lines.append(NO_OPTIONS)
    return lines


def _refilter_checkbox(state: CheckboxState, text: str) -> CheckboxState:
    needle = text.lower()
    indices = [i for i, option in enumerate(state.options) if fuzzy_match(option.name.lower(), needle)]
    indices.sort(key=lambda i: state.options[i].name)

    if not indices:
        return replace(state, input=text, filtered_indices=indices, selected_index=0, start_index=0)
    selected = min(state.selected_index, len(indices) - 1)
    start = min(state.start_index, max(0, len(indices) - state.max_lines))
    return replace(state, input=text, filtered_indices=indices, selected_index=selected, start_index=start)


def checkbox_result(state: CheckboxState) -> list[OptionValue]:
    """The value a checkbox resolves with on ENTER."""
    result = [
        OptionValue(name=option.name, value=option.value, selected=state.selections[i])
        for i, option in enumerate(state.options)
    ]
    if state.return_full_results:
        return result
    return [option for option in result if option.selected]


def checkbox_on_event(event: UIEvent, state: CheckboxState) -> EventResult[CheckboxState]:
    if isinstance(event, CharEvent):
        return EventResult(_refilter_checkbox(state, state.input + event.char))
    if not isinstance(event, KeyEvent):
        return EventResult(state)

    count = len(state.filtered_indices)
    name = event.key.name
    if name == "up" and count:
        selected, start = _move_up(state.selected_index, state.start_index, count, state.max_lines)
        return EventResult(replace(state, selected_index=selected, start_index=start))
    if name == "down" and count:
        selected, start = _move_down(state.selected_index, state.start_index, count, state.max_lines)
        return EventResult(replace(state, selected_index=selected, start_index=start))
    if name == "backspace":
        return EventResult(_refilter_checkbox(state, state.input[:-1]))
    if name == "space" and count:
        original = state.filtered_indices[state.selected_index]
        selections = list(state.selections)
        selections[original] = not selections[original]
        return EventResult(replace(state, selections=selections))
    if name == "enter":
        return EventResult(state, done=True, value=checkbox_result(state))
    return EventResult(state)


# ---------------------------------------------------------------------------
# Runners
# ---------------------------------------------------------------------------

def _engine(session: KeypressSession, output: TextIO | None, clear_screen: bool) -> UIEngine:
    return UIEngine(
        session.stream,
        output=output,
        no_tty=session.no_tty,
        session=session,
        clear_screen_on_start=clear_screen,
    )


async def list_prompt(
    options: list[OptionValue],
    prompt_message: str,
    max_lines: int,
    session: KeypressSession,
    output: TextIO | None = None,
    clear_screen: bool = True,
) -> Any:
    """Single-select from *options*; resolves with the chosen value."""
    if not options:
        raise EmptyOptionsError("list")
    state = ListState(options=options, max_lines=max_lines, prompt_message=prompt_message)
    return await _engine(session, output, clear_screen).run(
        ScreenConfig(initial_state=state, render=list_render, on_event=list_on_event)
    )


async def autocomplete_prompt(
    options: list[OptionValue],
    prompt_message: str,
    max_lines: int,
    session: KeypressSession,
    output: TextIO | None = None,
    allow_custom: bool = False,
    clear_screen: bool = True,
) -> Any:
    """Filtered single-select; resolves with the chosen value or custom text."""
    if not options:
        raise EmptyOptionsError("autocomplete")
    state = AutocompleteState(
        options=options,
        max_lines=max_lines,
        prompt_message=prompt_message,
        allow_custom=allow_custom,
    )
    return await _engine(session, output, clear_screen).run(
        ScreenConfig(initial_state=state, render=autocomplete_render, on_event=autocomplete_on_event)
    )


async def checkbox_prompt(
    options: list[OptionValue],
    prompt_message: str,
    max_lines: int,
    session: KeypressSession,
    output: TextIO | None = None,
    default_selections: list[bool] | None = None,
    return_full_results: bool = False,
    clear_screen: bool = True,
) -> list[OptionValue] | None:
    """Filtered multi-select; resolves with annotated options."""
    if not options:
        raise EmptyOptionsError("checkbox")
    state = CheckboxState(
        options=options,
        max_lines=max_lines,
        prompt_message=prompt_message,
        return_full_results=return_full_results,
        selections=list(default_selections or []),
    )
    return await _engine(session, output, clear_screen).run(
        ScreenConfig(initial_state=state, render=checkbox_render, on_event=checkbox_on_event)
    )
