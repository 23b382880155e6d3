"""
Command-line interface for the inquiry engine.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from inquiry_engine.config import PrompterConfig
from inquiry_engine.errors import ConfigurationError, MissingArgumentsError
from inquiry_engine.logging import setup_logging
from inquiry_engine.prompter import ManPageInfo, Prompter, PromptOptions
from inquiry_engine.question import OptionValue, load_questions
from inquiry_engine.resolvers import create_default_registry

console = Console()


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Ask a set of questions from a YAML or JSON file",
        prog="inquiry-engine",
    )

    # Global options
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (debug logging)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Ask command
    ask_parser = subparsers.add_parser("ask", help="Answer the questions in a file")
    ask_parser.add_argument("file", help="Question file (.yaml, .yml or .json)")
    ask_parser.add_argument("positionals", nargs="*", help="Positional answers")
    ask_parser.add_argument(
        "-s",
        "--set",
        action="append",
        dest="values",
        default=[],
        metavar="NAME=VALUE",
        help="Provide an answer; repeat a name to give several values",
    )
    ask_parser.add_argument(
        "--no-tty",
        action="store_true",
        default=None,
        help="Never prompt (default: prompt only when stdin is a terminal)",
    )
    ask_parser.add_argument(
        "--use-defaults",
        action="store_true",
        help="Take declared defaults without asking",
    )
    ask_parser.add_argument(
        "-c",
        "--config",
        help="Prompter config file (YAML)",
    )
    ask_parser.add_argument(
        "--json",
        action="store_true",
        help="Output answers as JSON",
    )

    # Man command
    man_parser = subparsers.add_parser("man", help="Show the reference page for a question file")
    man_parser.add_argument("file", help="Question file (.yaml, .yml or .json)")
    man_parser.add_argument("--name", help="Command name shown on the page")
    man_parser.add_argument("--author", help="Author shown on the page")
    man_parser.add_argument("--description", help="One-line description")

    # Resolvers command
    subparsers.add_parser("resolvers", help="List built-in resolvers and their current values")

    args = parser.parse_args(argv)

    # Setup logging based on verbosity
    if getattr(args, "verbose", False):
        setup_logging("DEBUG")
    else:
        setup_logging("WARNING")

    if args.command == "ask":
        asyncio.run(cmd_ask(args))
    elif args.command == "man":
        cmd_man(args)
    elif args.command == "resolvers":
        asyncio.run(cmd_resolvers(args))
    else:
        parser.print_help()


def parse_set_values(values: list[str]) -> dict[str, Any]:
    """Turn ``NAME=VALUE`` pairs into an answer bag; repeated names become lists."""
    answers: dict[str, Any] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise ConfigurationError(f"Expected NAME=VALUE, got {item!r}")
        if name in answers:
            existing = answers[name]
            answers[name] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            answers[name] = value
    return answers


def _jsonable(value: Any) -> Any:
    if isinstance(value, OptionValue):
        return value.to_dict()
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def _load(path: str) -> list:
    try:
        return load_questions(Path(path))
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


async def cmd_ask(args: argparse.Namespace) -> None:
    """Answer the questions in a file."""
    questions = _load(args.file)

    config = PrompterConfig.from_yaml(Path(args.config)) if args.config else PrompterConfig()
    config = PrompterConfig.from_env(config)
    if args.no_tty is not None:
        config.no_tty = args.no_tty
    elif not sys.stdin.isatty():
        config.no_tty = True
    if args.use_defaults:
        config.use_defaults = True

    try:
        answers = parse_set_values(args.values)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    answers["_"] = list(args.positionals)

    prompter = Prompter.from_config(config)
    options = PromptOptions(
        man_page_info=ManPageInfo(command_name=f"inquiry-engine ask {args.file}", questions=questions),
    )
    try:
        answers = await prompter.prompt(answers, questions, options)
    except MissingArgumentsError:
        sys.exit(1)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    finally:
        prompter.close()

    if args.json:
        console.print_json(json.dumps(_jsonable(answers)))
        return

    table = Table(title="Answers")
    table.add_column("Name", style="cyan")
    table.add_column("Value")
    for name, value in answers.items():
        if name == "_":
            continue
        if isinstance(value, list):
            value = ", ".join(v.name if isinstance(v, OptionValue) else str(v) for v in value)
        table.add_row(name, Text(str(value)))
    console.print(table)

    leftovers = answers.get("_") or []
    if leftovers:
        console.print(f"\n[dim]Unused arguments: {' '.join(map(str, leftovers))}[/dim]")


def cmd_man(args: argparse.Namespace) -> None:
    """Show the reference page for a question file."""
    questions = _load(args.file)
    prompter = Prompter(no_tty=True)
    page = prompter.generate_man_page(
        ManPageInfo(
            command_name=args.name or Path(args.file).stem,
            questions=questions,
            author=args.author,
            description=args.description,
        )
    )
    console.print(page)


async def cmd_resolvers(args: argparse.Namespace) -> None:
    """List built-in resolvers and their current values."""
    registry = create_default_registry()

    table = Table(title="Resolvers")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key in registry.keys():
        value = await registry.resolve(key)
        table.add_row(key, Text("-", style="dim") if value is None else Text(str(value)))
    console.print(table)
