"""
Exception hierarchy for the inquiry engine.

Configuration errors are raised immediately and never retried. Validation
problems only surface as exceptions when no terminal is available.
"""

from __future__ import annotations

MISSING_ARGUMENTS_MESSAGE = "Missing required arguments. Please provide all required parameters."


class InquiryError(Exception):
    """Base class for all errors raised by the inquiry engine."""


class ConfigurationError(InquiryError):
    """The caller handed the engine a question set it cannot run."""


class UnknownDependencyError(ConfigurationError):
    """A ``depends_on`` entry names a question that was never declared."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown dependency: {name}")
        self.name = name


class DependencyCycleError(ConfigurationError):
    """The ``depends_on`` graph loops back on itself."""

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(f"Dependency cycle: {' -> '.join(cycle)}")
        self.cycle = cycle


class EmptyOptionsError(ConfigurationError):
    """A selectable question was prompted with zero options."""

    def __init__(self, prompt_type: str) -> None:
        super().__init__(f"{prompt_type} requires options")
        self.prompt_type = prompt_type


class QuestionFormatError(ConfigurationError):
    """Raw question data could not be turned into a question."""


class MissingArgumentsError(InquiryError):
    """Required answers are missing or invalid and there is no terminal to ask."""

    def __init__(self, message: str = MISSING_ARGUMENTS_MESSAGE) -> None:
        super().__init__(message)
