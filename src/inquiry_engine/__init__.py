"""
Inquiry Engine - interactive terminal prompting for command-line tools.

Answers a declarative set of questions (text, number, confirm, list,
autocomplete, checkbox) either from arguments, resolvers and defaults or
by prompting on the terminal. The same question set works with and
without a terminal.

Example:
    from inquiry_engine import Prompter, ListQuestion, TextQuestion

    prompter = Prompter()

    answers = await prompter.prompt(
        {"_": ["my-app"], "f": "Vue"},
        [
            TextQuestion(name="name", positional=True, required=True),
            ListQuestion(name="framework", alias="f", options=["React", "Vue"]),
            TextQuestion(name="author", default_from="git.user.name"),
        ],
    )
    # {"_": [], "name": "my-app", "framework": "Vue", "author": "..."}

    prompter.close()
"""

from inquiry_engine.config import PrompterConfig
from inquiry_engine.errors import (
    ConfigurationError,
    DependencyCycleError,
    EmptyOptionsError,
    InquiryError,
    MissingArgumentsError,
    QuestionFormatError,
    UnknownDependencyError,
)
from inquiry_engine.logging import get_logger, setup_logging
from inquiry_engine.prompter import (
    ManPageInfo,
    PromptContext,
    Prompter,
    PromptOptions,
    reorder_questions_by_deps,
)
from inquiry_engine.question import (
    UNSET,
    AutocompleteQuestion,
    CheckboxQuestion,
    ConfirmQuestion,
    ListQuestion,
    NumberQuestion,
    OptionValue,
    Question,
    TextQuestion,
    Validation,
    load_questions,
    questions_from_list,
)
from inquiry_engine.resolvers import ResolverRegistry, create_default_registry
from inquiry_engine.tui.engine import UIEngine
from inquiry_engine.tui.progress import ProgressBar
from inquiry_engine.tui.spinner import Spinner
from inquiry_engine.tui.stream import StreamingText

__version__ = "0.1.0"

__all__ = [
    # Prompter
    "Prompter",
    "PromptOptions",
    "PromptContext",
    "ManPageInfo",
    "PrompterConfig",
    "reorder_questions_by_deps",
    # Questions
    "Question",
    "TextQuestion",
    "NumberQuestion",
    "ConfirmQuestion",
    "ListQuestion",
    "AutocompleteQuestion",
    "CheckboxQuestion",
    "OptionValue",
    "Validation",
    "UNSET",
    "load_questions",
    "questions_from_list",
    # Resolvers
    "ResolverRegistry",
    "create_default_registry",
    # Terminal UI
    "UIEngine",
    "Spinner",
    "ProgressBar",
    "StreamingText",
    # Errors
    "InquiryError",
    "ConfigurationError",
    "UnknownDependencyError",
    "DependencyCycleError",
    "EmptyOptionsError",
    "QuestionFormatError",
    "MissingArgumentsError",
    # Logging
    "setup_logging",
    "get_logger",
]
