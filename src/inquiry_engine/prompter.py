"""
Prompt orchestrator.

``Prompter.prompt()`` takes an answer bag (typically parsed command line
arguments, with unnamed positionals under ``"_"``) and a list of questions,
and fills in every answer that is still missing. Values come from, in
order: aliases, resolvers (``set_from``), positional arguments, explicit
overrides, and finally interactive prompts or declared defaults.

Example:
    from inquiry_engine import Prompter, TextQuestion, ListQuestion

    prompter = Prompter()
    answers = await prompter.prompt(
        {"_": ["my-app"]},
        [
            TextQuestion(name="name", positional=True, required=True),
            ListQuestion(name="framework", options=["React", "Vue"]),
        ],
    )
    prompter.close()
"""

from __future__ import annotations

import dataclasses
import re
import sys
from dataclasses import dataclass
from typing import Any, TextIO

from rich.console import Console
from rich.text import Text

from inquiry_engine.config import PrompterConfig
from inquiry_engine.errors import (
    MISSING_ARGUMENTS_MESSAGE,
    DependencyCycleError,
    MissingArgumentsError,
    UnknownDependencyError,
)
from inquiry_engine.logging import get_logger, setup_logging
from inquiry_engine.question import (
    AutocompleteQuestion,
    CheckboxQuestion,
    ConfirmQuestion,
    ListQuestion,
    NumberQuestion,
    OptionValue,
    Question,
    TextQuestion,
    Validation,
)
from inquiry_engine.resolvers import ResolverRegistry, create_default_registry
from inquiry_engine.tui import keypress
from inquiry_engine.tui.ansi import FG, clear_screen, style
from inquiry_engine.tui.keypress import ExitProcess, KeypressSession
from inquiry_engine.tui.prompts import autocomplete_prompt, checkbox_prompt, list_prompt
from inquiry_engine.tui.terminal import InputStream, TerminalInput

logger = get_logger("prompter")

_SELECT_TYPES = ("list", "autocomplete", "checkbox")


# ---------------------------------------------------------------------------
# Call options
# ---------------------------------------------------------------------------

@dataclass
class ManPageInfo:
    """Inputs for :meth:`Prompter.generate_man_page`."""

    command_name: str
    questions: list[Question]
    author: str | None = None
    description: str | None = None


@dataclass
class PromptOptions:
    """Per-call options for :meth:`Prompter.prompt`."""

    usage_text: str | None = None  # Printed when required answers are missing
    man_page_info: ManPageInfo | None = None  # Used when there is no usage text
    mutate_args: bool | None = None  # Overrides the prompter setting when set


# ---------------------------------------------------------------------------
# Per-question attempt tracking
# ---------------------------------------------------------------------------

class PromptContext:
    """Attempt count and last validation result for one question."""

    def __init__(self) -> None:
        self.num_tries = 0
        self.needs_input = True
        self.validation = Validation(success=False)

    def try_again(self, validation: Validation) -> None:
        self.num_tries += 1
        self.needs_input = True
        self.validation = Validation(
            success=False,
            type=validation.type or self.validation.type,
            reason=validation.reason,
        )

    def next_question(self) -> None:
        self.num_tries = 0
        self.needs_input = False
        self.validation = Validation(success=True)

    def process(self, result: bool | Validation) -> Validation:
        """Record a validator result, which may be a bare bool."""
        if isinstance(result, bool):
            result = Validation(success=True) if result else Validation(success=False, type="validation")
        if result.success:
            self.next_question()
        else:
            self.try_again(result)
        return self.validation


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def is_empty_answer(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, list) and not value)


def reorder_questions_by_deps(questions: list[Question]) -> list[Question]:
    """
    Order questions so every ``depends_on`` entry comes first.

    Declaration order is kept otherwise.

    Raises:
        UnknownDependencyError: A dependency names no declared question
        DependencyCycleError: The dependencies loop
    """
    by_name = {q.name: q for q in questions}
    resolved: set[str] = set()
    visiting: list[str] = []
    result: list[Question] = []

    def add(question: Question) -> None:
        if question.name in resolved:
            return
        if question.name in visiting:
            cycle = visiting[visiting.index(question.name):] + [question.name]
            raise DependencyCycleError(cycle)

        visiting.append(question.name)
        for dep in question.depends_on:
            if dep not in by_name:
                raise UnknownDependencyError(dep)
            add(by_name[dep])
        visiting.pop()

        resolved.add(question.name)
        result.append(question)

    for question in questions:
        add(question)

    if [q.name for q in result] != [q.name for q in questions]:
        logger.debug("Reordered questions: %s", [q.name for q in result])
    return result


def _flag(alias: str) -> str:
    return f"-{alias}" if len(alias) == 1 else f"--{alias}"


def validation_message(question: Question, ctx: PromptContext) -> str:
    """The red annotation shown after a failed attempt, or ``""``."""
    if ctx.num_tries == 0 or ctx.validation.success:
        return ""
    if ctx.validation.reason:
        text = f'The field "{question.name}" is invalid: {ctx.validation.reason}'
    elif ctx.validation.type == "required":
        text = f'The field "{question.name}" is required. Please provide a value.'
    elif ctx.validation.type == "pattern":
        text = f'The field "{question.name}" does not match the pattern: {question.pattern}.'
    else:
        text = f'The field "{question.name}" is invalid. Please try again.'
    return style(text, fg=FG.RED)


def generate_prompt_message(question: Question, ctx: PromptContext) -> str:
    """
    Build the header shown above an input.

    The first line carries the message, the accepted flags and the inline
    default; description and validation annotations follow on their own
    lines.
    """
    flags = ", ".join(_flag(a) for a in [question.name, *question.aliases])
    line = style(question.message or f"{question.name}?", fg=FG.BRIGHT_WHITE, bold=True)
    line += " " + style(f"({flags})", dim=True)

    default = question.default if question.has_default else None
    if question.type == "confirm":
        line += " (y/n)"
        if default is not None:
            line += " " + style(f"[{'y' if default else 'n'}]", fg=FG.YELLOW)
    elif question.type in _SELECT_TYPES:
        if default is not None:
            defaults = default if isinstance(default, list) else [default]
            rendered = style(", ", fg=FG.GRAY).join(style(str(d), fg=FG.YELLOW) for d in defaults)
            line += " " + style(f"[{rendered}]", fg=FG.YELLOW)
    elif default is not None:
        line += " " + style(f"[{default}]", fg=FG.YELLOW)

    lines = [line]
    if question.description:
        lines.append(style(question.description, dim=True))
    annotation = validation_message(question, ctx)
    if annotation:
        lines.append(annotation)
    return "\n".join(lines)


def _parse_number(text: str) -> int | float | None:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Prompter
# ---------------------------------------------------------------------------

class Prompter:
    """
    Answers questions from arguments, resolvers, defaults or the user.

    Args:
        no_tty: Never prompt. Missing required answers raise
            ``MissingArgumentsError`` after defaults are applied.
        input: Input stream; defaults to the shared ``sys.stdin`` wrapper.
        output: Where prompts are written; defaults to ``sys.stdout``.
        use_defaults: Take declared defaults without asking.
        global_max_lines: Visible options in select prompts.
        mutate_args: Write answers into the caller's dict.
        resolver_registry: Registry for ``*_from`` keys; a fresh default
            registry is created when omitted.
        clear_screen: Clear the screen before each prompt.
        exit_process: Called on Ctrl+C; defaults to ``sys.exit``.
    """

    def __init__(
        self,
        no_tty: bool = False,
        input: InputStream | None = None,
        output: TextIO | None = None,
        use_defaults: bool = False,
        global_max_lines: int = 10,
        mutate_args: bool = True,
        resolver_registry: ResolverRegistry | None = None,
        clear_screen: bool = True,
        exit_process: ExitProcess | None = None,
    ) -> None:
        self.no_tty = no_tty
        self.use_defaults = use_defaults
        self.global_max_lines = global_max_lines
        self.mutate_args = mutate_args
        self.clear_screen = clear_screen
        self.resolver_registry = resolver_registry if resolver_registry is not None else create_default_registry()
        self._output: TextIO = output or sys.stdout

        self._session: KeypressSession | None = None
        if not no_tty:
            stream = input if input is not None else TerminalInput.for_file()
            self._session = keypress.attach(stream, exit_process=exit_process)
            if not self._session.supports_raw_mode:
                logger.debug("Input stream has no raw mode; select prompts use defaults")

    @classmethod
    def from_config(cls, config: PrompterConfig, **kwargs: Any) -> Prompter:
        """Build a prompter from a :class:`PrompterConfig`."""
        if config.log_level:
            setup_logging(level=config.log_level)
        return cls(
            no_tty=config.no_tty,
            use_defaults=config.use_defaults,
            global_max_lines=config.global_max_lines,
            mutate_args=config.mutate_args,
            clear_screen=config.clear_screen,
            **kwargs,
        )

    @property
    def session(self) -> KeypressSession | None:
        return self._session

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def prompt(
        self,
        argv: dict[str, Any],
        questions: list[Question | dict[str, Any]],
        options: PromptOptions | None = None,
    ) -> dict[str, Any]:
        """
        Fill *argv* with an answer for every question.

        Args:
            argv: Answer bag; ``argv["_"]`` holds unnamed positionals
            questions: Questions or question mappings; never modified
            options: Usage text, man page info and mutation override

        Returns:
            The completed answer bag (``argv`` itself when mutating)

        Raises:
            ConfigurationError: Bad dependencies or empty options
            MissingArgumentsError: Required answers are missing and cannot
                be prompted for
        """
        options = options or PromptOptions()
        should_mutate = options.mutate_args if options.mutate_args is not None else self.mutate_args

        questions = [self._copy_question(q) for q in questions]
        if should_mutate:
            answers = argv
        else:
            answers = dict(argv)
            if isinstance(argv.get("_"), list):
                answers["_"] = list(argv["_"])
        handled: set[str] = set()

        self._expand_aliases(questions, answers)
        await self._resolve_dynamic_defaults(questions)
        await self._resolve_options_from(questions)
        await self._resolve_set_values(questions, answers)

        consumed = self._extract_positional_args(answers, questions)
        if consumed and isinstance(answers.get("_"), list):
            answers["_"] = answers["_"][consumed:]

        self._apply_overrides(answers, questions, handled)

        if self.no_tty and self._has_missing_required(questions, answers):
            self._apply_default_values(questions, answers)
            if self._has_missing_required(questions, answers):
                self._report_missing_arguments(options)
                raise MissingArgumentsError()

        for question in reorder_questions_by_deps(questions):
            ctx = PromptContext()

            if question.name in answers:
                self._handle_overrides(answers, question, handled)
                continue

            if question.when is not None and not question.when(answers):
                continue

            if question.has_default and (self.use_defaults or question.use_default):
                answers[question.name] = question.default
                continue

            while ctx.needs_input:
                answers[question.name] = await self._handle_question_type(question, ctx)
                if self._is_valid(question, answers, ctx):
                    ctx.next_question()
                    continue
                if not self._can_prompt(question):
                    raise MissingArgumentsError()
                logger.debug("Invalid answer for %s, attempt %d", question.name, ctx.num_tries)

        return answers

    def close(self) -> None:
        """Release the input session."""
        if self._session is not None:
            self._session.destroy()
            self._session = None

    def exit(self) -> None:
        """Clear the screen and release the input session."""
        self._clear_screen()
        self.close()

    # ------------------------------------------------------------------
    # Line primitives
    # ------------------------------------------------------------------

    async def text(self, question: TextQuestion, ctx: PromptContext) -> Any:
        if self._session is None:
            return question.default if question.has_default else None
        answer = await self._ask_line(question, ctx)
        if answer.strip():
            return answer
        return question.default if question.has_default else None

    async def number(self, question: NumberQuestion, ctx: PromptContext) -> Any:
        if self._session is None:
            return question.default if question.has_default else None
        answer = (await self._ask_line(question, ctx)).strip()
        if answer:
            # Unparseable input is kept as text and fails validation
            parsed = _parse_number(answer)
            return parsed if parsed is not None else answer
        return question.default if question.has_default else None

    async def confirm(self, question: ConfirmQuestion, ctx: PromptContext) -> bool:
        default = bool(question.default) if question.has_default and question.default is not None else False
        if self._session is None:
            return default
        answer = (await self._ask_line(question, ctx)).strip().lower()
        if not answer:
            return default
        return answer in ("y", "yes")

    # ------------------------------------------------------------------
    # Select prompts
    # ------------------------------------------------------------------

    async def select(self, question: ListQuestion, ctx: PromptContext) -> Any:
        if not self._can_prompt(question):
            return question.default if question.has_default else None
        self._clear_screen()
        return await list_prompt(
            question.options,
            generate_prompt_message(question, ctx),
            self._max_lines(question),
            self._session,
            output=self._output,
            clear_screen=False,
        )

    async def autocomplete(self, question: AutocompleteQuestion, ctx: PromptContext) -> Any:
        if not self._can_prompt(question):
            return question.default if question.has_default else None
        self._clear_screen()
        return await autocomplete_prompt(
            question.options,
            generate_prompt_message(question, ctx),
            self._max_lines(question),
            self._session,
            output=self._output,
            allow_custom=question.allow_custom_options,
            clear_screen=False,
        )

    async def checkbox(self, question: CheckboxQuestion, ctx: PromptContext) -> list[OptionValue] | None:
        defaults = self._checkbox_defaults(question)
        preselected = [o.name in defaults or o.value in defaults for o in question.options]
        if not self._can_prompt(question):
            if question.return_full_results:
                return [
                    OptionValue(name=o.name, value=o.value, selected=selected)
                    for o, selected in zip(question.options, preselected)
                ]
            return [
                OptionValue(name=o.name, value=o.value, selected=True)
                for o, selected in zip(question.options, preselected)
                if selected
            ]

        self._clear_screen()
        return await checkbox_prompt(
            question.options,
            generate_prompt_message(question, ctx),
            self._max_lines(question),
            self._session,
            output=self._output,
            default_selections=preselected,
            return_full_results=question.return_full_results,
            clear_screen=False,
        )

    # ------------------------------------------------------------------
    # Man page
    # ------------------------------------------------------------------

    def generate_man_page(self, info: ManPageInfo) -> Text:
        """Render a reference page for a command and its questions."""
        header = "white"
        value = "bright_black"
        page = Text()

        required_args = Text()
        optional_args = Text()
        for q in info.questions:
            if q.required:
                required_args.append(f" --{q.name}", style=header)
                required_args.append(f" <{q.name}>", style=value)
            else:
                optional_args.append(f" [--{q.name}", style=header)
                if q.has_default and q.default not in (None, "", False):
                    optional_args.append(f"={q.default}", style=value)
                optional_args.append("]", style=header)

        page.append("NAME\n", style=header)
        page.append(f"\t{info.command_name}", style=header)
        page.append(f" {info.description or ''}\n\n")

        page.append("SYNOPSIS\n", style=header)
        page.append(f"\t{info.command_name}", style=header)
        page.append_text(required_args)
        page.append_text(optional_args)
        page.append("\n\n")

        page.append("DESCRIPTION\n", style=header)
        page.append("\tUse this command to interact with the application. It supports the following options:\n\n")

        for q in info.questions:
            page.append(f"{q.name.upper()}\n", style=header)
            self._man_field(page, "Type", q.type)
            if q.aliases:
                self._man_field(page, "Alias", ", ".join(_flag(a) for a in q.aliases))
            if q.message:
                self._man_field(page, "Summary", q.message)
            if q.description:
                self._man_field(page, "Description", q.description)
            if q.has_options:
                listed = ", ".join(
                    o.name if o.name == str(o.value) else f"{o.name} ({o.value})"
                    for o in q.options  # type: ignore[attr-defined]
                )
                self._man_field(page, "Options", listed)
            if q.has_default:
                self._man_field(page, "Default", repr(q.default))
            self._man_field(page, "Required", "Yes" if q.required else "No")
            page.append("\n")

        page.append("EXAMPLES\n", style=header)
        page.append("\tExample usage of `")
        page.append(info.command_name, style=header)
        page.append("`.\n\t$ ")
        page.append(info.command_name, style=header)
        page.append_text(required_args)
        page.append_text(optional_args)
        page.append("\n\n")

        if info.author:
            page.append("AUTHOR\n", style=header)
            page.append(f"\t{info.author}\n", style=header)
        return page

    @staticmethod
    def _man_field(page: Text, label: str, content: str) -> None:
        page.append(f"\t{label}: ", style="white")
        page.append(f"{content}\n", style="bright_black")

    # ------------------------------------------------------------------
    # Answer bag normalization
    # ------------------------------------------------------------------

    @staticmethod
    def _copy_question(question: Question | dict[str, Any]) -> Question:
        if isinstance(question, dict):
            return Question.from_dict(question)
        return dataclasses.replace(question, depends_on=list(question.depends_on))

    @staticmethod
    def _expand_aliases(questions: list[Question], answers: dict[str, Any]) -> None:
        for question in questions:
            if question.name in answers:
                continue
            for alias in question.aliases:
                if alias in answers:
                    answers[question.name] = answers.pop(alias)
                    break

    async def _resolve_dynamic_defaults(self, questions: list[Question]) -> None:
        for question in questions:
            if question.default_from:
                resolved = await self.resolver_registry.resolve(question.default_from)
                if resolved is not None:
                    question.default = resolved

    async def _resolve_options_from(self, questions: list[Question]) -> None:
        for question in questions:
            if question.options_from and question.has_options:
                resolved = await self.resolver_registry.resolve(question.options_from)
                if isinstance(resolved, list):
                    question.options = [OptionValue.coerce(o) for o in resolved]  # type: ignore[attr-defined]

    async def _resolve_set_values(self, questions: list[Question], answers: dict[str, Any]) -> None:
        for question in questions:
            if question.set_from and question.name not in answers:
                resolved = await self.resolver_registry.resolve(question.set_from)
                if resolved is not None:
                    answers[question.name] = resolved

    @staticmethod
    def _extract_positional_args(answers: dict[str, Any], questions: list[Question]) -> int:
        """Assign leftover positionals to positional questions; return how many were used."""
        positionals = answers.get("_")
        if not isinstance(positionals, list) or not positionals:
            return 0

        index = 0
        for question in questions:
            if not question.positional:
                continue
            if question.name in answers and question.name != "_":
                continue
            if index >= len(positionals):
                break
            answers[question.name] = positionals[index]
            index += 1
        return index

    @staticmethod
    def _apply_default_values(questions: list[Question], answers: dict[str, Any]) -> None:
        for question in questions:
            if question.has_default and question.name not in answers:
                answers[question.name] = question.default

    @staticmethod
    def _has_missing_required(questions: list[Question], answers: dict[str, Any]) -> bool:
        return any(q.required and is_empty_answer(answers.get(q.name)) for q in questions)

    def _apply_overrides(self, answers: dict[str, Any], questions: list[Question], handled: set[str]) -> None:
        for question in questions:
            if question.name in answers:
                self._handle_overrides(answers, question, handled)

    def _handle_overrides(self, answers: dict[str, Any], question: Question, handled: set[str]) -> None:
        if question.name not in answers or question.name in handled:
            return
        handled.add(question.name)

        if question.type in ("list", "autocomplete"):
            self._override_with_options(answers, question)  # type: ignore[arg-type]
        elif question.type == "checkbox":
            self._override_checkbox(answers, question)  # type: ignore[arg-type]
        elif question.type == "number" and isinstance(answers[question.name], str):
            parsed = _parse_number(answers[question.name].strip())
            if parsed is not None:
                answers[question.name] = parsed

    @staticmethod
    def _override_with_options(answers: dict[str, Any], question: ListQuestion | AutocompleteQuestion) -> None:
        given = answers[question.name]
        if not isinstance(given, str):
            return
        for option in question.options:
            if option.name == given or str(option.value) == given:
                answers[question.name] = option.value
                return
        # Unknown values without allow_custom_options stay as given and
        # are left to validation.

    @staticmethod
    def _override_checkbox(answers: dict[str, Any], question: CheckboxQuestion) -> None:
        given = answers[question.name]
        items = given if isinstance(given, list) else [given]
        inputs = [item.name if isinstance(item, OptionValue) else str(item) for item in items]
        wanted = set(inputs)

        result = [
            OptionValue(
                name=option.name,
                value=option.value,
                selected=option.name in wanted or str(option.value) in wanted,
            )
            for option in question.options
        ]

        if question.allow_custom_options:
            known = {option.name for option in question.options}
            known.update(str(option.value) for option in question.options)
            for text in inputs:
                if text not in known:
                    known.add(text)
                    result.append(OptionValue(name=text, value=text, selected=True))

        answers[question.name] = result if question.return_full_results else [o for o in result if o.selected]

    # ------------------------------------------------------------------
    # Prompting and validation
    # ------------------------------------------------------------------

    def _can_prompt(self, question: Question) -> bool:
        if self._session is None:
            return False
        if question.type in _SELECT_TYPES:
            return self._session.supports_raw_mode
        return True

    async def _handle_question_type(self, question: Question, ctx: PromptContext) -> Any:
        if self._session is not None:
            self._session.clear_handlers()

        if isinstance(question, ConfirmQuestion):
            return await self.confirm(question, ctx)
        if isinstance(question, CheckboxQuestion):
            return await self.checkbox(question, ctx)
        if isinstance(question, ListQuestion):
            return await self.select(question, ctx)
        if isinstance(question, AutocompleteQuestion):
            return await self.autocomplete(question, ctx)
        if isinstance(question, NumberQuestion):
            return await self.number(question, ctx)
        return await self.text(question, ctx)  # type: ignore[arg-type]

    def _is_valid(self, question: Question, answers: dict[str, Any], ctx: PromptContext) -> bool:
        if answers.get(question.name) is not None:
            if question.sanitize is not None:
                answers[question.name] = question.sanitize(answers[question.name], answers)
            validation = self._validate_answer(question, answers[question.name], answers, ctx)
            if not validation.success:
                return False

        if question.required and is_empty_answer(answers.get(question.name)):
            ctx.try_again(Validation(success=False, type="required"))
            return False
        return True

    @staticmethod
    def _validate_answer(question: Question, value: Any, answers: dict[str, Any], ctx: PromptContext) -> Validation:
        if question.type == "number" and isinstance(value, str):
            return ctx.process(Validation(success=False, type="validation", reason=f"{value!r} is not a number"))
        if question.pattern and isinstance(value, str) and not re.search(question.pattern, value):
            return ctx.process(Validation(success=False, type="pattern"))
        if question.validate is not None:
            return ctx.process(question.validate(value, answers))
        return ctx.process(Validation(success=True))

    def _max_lines(self, question: ListQuestion | AutocompleteQuestion | CheckboxQuestion) -> int:
        if question.max_display_lines:
            return question.max_display_lines
        return max(1, min(self.global_max_lines, len(question.options)))

    @staticmethod
    def _checkbox_defaults(question: CheckboxQuestion) -> list[Any]:
        if not question.has_default or question.default is None:
            return []
        return question.default if isinstance(question.default, list) else [question.default]

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    async def _ask_line(self, question: Question, ctx: PromptContext) -> str:
        self._clear_screen()
        self._write(generate_prompt_message(question, ctx) + "\n" + style(">", fg=FG.WHITE) + " ")
        return await self._session.read_line()  # type: ignore[union-attr]

    def _report_missing_arguments(self, options: PromptOptions) -> None:
        console = Console(file=self._output, highlight=False, soft_wrap=True)
        if options.usage_text:
            console.print(options.usage_text, markup=False)
        elif options.man_page_info is not None:
            console.print(self.generate_man_page(options.man_page_info))
        else:
            console.print(MISSING_ARGUMENTS_MESSAGE, markup=False)

    def _clear_screen(self) -> None:
        if self.clear_screen and not self.no_tty:
            self._write(clear_screen())

    def _write(self, data: str) -> None:
        self._output.write(data)
        self._output.flush()
