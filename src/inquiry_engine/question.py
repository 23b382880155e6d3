"""
Question data model.

Questions are plain dataclasses discriminated by their ``type`` class
attribute. They can be built directly, or from dicts, JSON or YAML via
:meth:`Question.from_dict`, :func:`questions_from_list` and
:func:`load_questions`.

Example:
    from inquiry_engine.question import ListQuestion, TextQuestion

    questions = [
        TextQuestion(name="name", required=True, alias="n"),
        ListQuestion(name="framework", options=["React", "Vue", "Svelte"]),
    ]
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar

import yaml

from inquiry_engine.errors import QuestionFormatError


class _Unset:
    """Marker for "no default declared"; distinct from a ``None`` default."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass
class OptionValue:
    """One selectable option. ``selected`` is only meaningful for checkboxes."""

    name: str
    value: Any = None
    selected: bool = False

    def __post_init__(self) -> None:
        if self.value is None:
            self.value = self.name

    @classmethod
    def coerce(cls, option: Any) -> OptionValue:
        """Accept a string, a mapping or an ``OptionValue``."""
        if isinstance(option, OptionValue):
            return cls(name=option.name, value=option.value, selected=option.selected)
        if isinstance(option, dict):
            if "name" not in option:
                raise QuestionFormatError(f"Option is missing a name: {option!r}")
            return cls(
                name=str(option["name"]),
                value=option.get("value", option["name"]),
                selected=bool(option.get("selected", False)),
            )
        if isinstance(option, (str, int, float)):
            return cls(name=str(option), value=option)
        raise QuestionFormatError(f"Unsupported option: {option!r}")

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value, "selected": self.selected}


@dataclass
class Validation:
    """Result of validating one answer."""

    success: bool
    type: str | None = None
    reason: str | None = None


@dataclass
class Question:
    """
    Fields shared by every question type.

    Attributes
    ----------
    name:
        Key of the answer in the answer bag.
    message:
        Prompt text; defaults to ``"<name>?"`` when rendering.
    default:
        Static default. ``UNSET`` means no default was declared.
    alias:
        Alternative answer keys, tried in order when ``name`` is absent.
    depends_on:
        Names of questions that must be answered first.
    when:
        ``when(answers)`` returning false skips the question.
    set_from, default_from, options_from:
        Resolver keys that set the answer, the default or the options.
    use_default:
        Take the default without prompting.
    positional:
        Consume the next unnamed positional argument.
    """

    type: ClassVar[str] = "text"

    name: str
    message: str | None = None
    description: str | None = None
    default: Any = UNSET
    required: bool = False
    pattern: str | None = None
    validate: Callable[[Any, dict[str, Any]], bool | Validation] | None = None
    sanitize: Callable[[Any, dict[str, Any]], Any] | None = None
    alias: str | list[str] | None = None
    depends_on: list[str] = field(default_factory=list)
    when: Callable[[dict[str, Any]], bool] | None = None
    set_from: str | None = None
    default_from: str | None = None
    options_from: str | None = None
    use_default: bool = False
    positional: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise QuestionFormatError("Question name must not be empty")

    @property
    def has_default(self) -> bool:
        return self.default is not UNSET

    @property
    def aliases(self) -> list[str]:
        if not self.alias:
            return []
        if isinstance(self.alias, str):
            return [self.alias]
        return list(self.alias)

    @property
    def has_options(self) -> bool:
        return False

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Question:
        """
        Build the right question subclass from a plain mapping.

        Keys may be snake_case or the camelCase form used by existing
        question files (``dependsOn``, ``setFrom``, ``_``, ...).
        """
        if not isinstance(data, dict):
            raise QuestionFormatError(f"Question must be a mapping, got {type(data).__name__}")

        kind = data.get("type", "text")
        cls = QUESTION_TYPES.get(kind)
        if cls is None:
            raise QuestionFormatError(f"Unknown question type: {kind}")

        allowed = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key == "type":
                continue
            target = _KEY_ALIASES.get(key, key)
            if target not in allowed:
                raise QuestionFormatError(f"Unknown field {key!r} for {kind} question")
            kwargs[target] = value

        if "name" not in kwargs:
            raise QuestionFormatError("Question is missing a name")
        if isinstance(kwargs.get("depends_on"), str):
            kwargs["depends_on"] = [kwargs["depends_on"]]

        try:
            return cls(**kwargs)
        except TypeError as e:
            raise QuestionFormatError(str(e)) from e


@dataclass
class TextQuestion(Question):
    type: ClassVar[str] = "text"


@dataclass
class NumberQuestion(Question):
    type: ClassVar[str] = "number"


@dataclass
class ConfirmQuestion(Question):
    type: ClassVar[str] = "confirm"


@dataclass
class _OptionsQuestion(Question):
    options: list[Any] = field(default_factory=list)
    max_display_lines: int | None = None
    allow_custom_options: bool = False

    def __post_init__(self) -> None:
        super().__post_init__()
        self.options = [OptionValue.coerce(option) for option in self.options]

    @property
    def has_options(self) -> bool:
        return True


@dataclass
class ListQuestion(_OptionsQuestion):
    type: ClassVar[str] = "list"


@dataclass
class AutocompleteQuestion(_OptionsQuestion):
    type: ClassVar[str] = "autocomplete"


@dataclass
class CheckboxQuestion(_OptionsQuestion):
    type: ClassVar[str] = "checkbox"

    return_full_results: bool = False


QUESTION_TYPES: dict[str, type[Question]] = {
    cls.type: cls
    for cls in (
        TextQuestion,
        NumberQuestion,
        ConfirmQuestion,
        ListQuestion,
        AutocompleteQuestion,
        CheckboxQuestion,
    )
}

_KEY_ALIASES = {
    "_": "positional",
    "dependsOn": "depends_on",
    "setFrom": "set_from",
    "defaultFrom": "default_from",
    "optionsFrom": "options_from",
    "useDefault": "use_default",
    "maxDisplayLines": "max_display_lines",
    "allowCustomOptions": "allow_custom_options",
    "returnFullResults": "return_full_results",
}


def questions_from_list(items: list[Any]) -> list[Question]:
    """Turn a list of mappings (or questions) into questions."""
    if not isinstance(items, list):
        raise QuestionFormatError("Questions must be a list")
    return [item if isinstance(item, Question) else Question.from_dict(item) for item in items]


def load_questions(path: str | Path) -> list[Question]:
    """
    Load questions from a YAML or JSON file.

    The file holds either a list of questions or a mapping with a
    ``questions`` key.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise QuestionFormatError(f"Cannot read {path}: {e}") from e

    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise QuestionFormatError(f"Cannot parse {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("questions")
    if data is None:
        raise QuestionFormatError(f"No questions found in {path}")
    return questions_from_list(data)
