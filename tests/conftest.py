"""Shared pytest fixtures for inquiry-engine tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from textwrap import dedent

import pytest

from inquiry_engine import Prompter, ResolverRegistry
from inquiry_engine.testing import CapturedOutput, ScriptedInput


@pytest.fixture
def stream() -> ScriptedInput:
    """A fresh raw-mode capable fake terminal."""
    return ScriptedInput()


@pytest.fixture
def output() -> CapturedOutput:
    """Collects everything the code under test writes."""
    return CapturedOutput()


@pytest.fixture
def exits() -> list[int]:
    """Exit codes passed to ``exit_process`` instead of exiting."""
    return []


@pytest.fixture
def registry() -> ResolverRegistry:
    """An empty resolver registry."""
    return ResolverRegistry()


@pytest.fixture
def prompter(
    stream: ScriptedInput,
    output: CapturedOutput,
    registry: ResolverRegistry,
    exits: list[int],
) -> Iterator[Prompter]:
    """An interactive prompter wired to the fake terminal."""
    p = Prompter(
        input=stream,
        output=output,
        resolver_registry=registry,
        exit_process=exits.append,
    )
    yield p
    p.close()


@pytest.fixture
def no_tty_prompter(output: CapturedOutput, registry: ResolverRegistry) -> Iterator[Prompter]:
    """A prompter that never asks."""
    p = Prompter(no_tty=True, output=output, resolver_registry=registry)
    yield p
    p.close()


@pytest.fixture
def questions_file(tmp_path: Path) -> Path:
    """A YAML question file using the camelCase keys of existing files."""
    path = tmp_path / "questions.yaml"
    path.write_text(
        dedent("""\
            questions:
              - name: name
                message: Project name
                required: true
                _: true
              - name: framework
                type: list
                alias: f
                options:
                  - React
                  - name: Vue
                    value: vue
                default: vue
              - name: port
                type: number
                default: 3000
              - name: features
                type: checkbox
                options: [Auth, Database]
                allowCustomOptions: true
                dependsOn: [framework]
        """)
    )
    return path
