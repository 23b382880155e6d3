"""Tests for CLI commands."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from inquiry_engine import ConfigurationError
from inquiry_engine.cli import main, parse_set_values


class TestParseSetValues:
    """Tests for NAME=VALUE parsing."""

    def test_pairs(self) -> None:
        assert parse_set_values(["a=1", "b=x=y"]) == {"a": "1", "b": "x=y"}

    def test_repeated_names_become_lists(self) -> None:
        assert parse_set_values(["f=a", "f=b", "f=c"]) == {"f": ["a", "b", "c"]}

    @pytest.mark.parametrize("item", ["novalue", "=value"])
    def test_rejects_malformed(self, item: str) -> None:
        with pytest.raises(ConfigurationError):
            parse_set_values([item])


class TestAsk:
    """Tests for the ask command."""

    def test_json_answers(self, questions_file: Path, capsys) -> None:
        """Should fill defaults and positionals without a terminal."""
        main(["ask", str(questions_file), "my-app", "--no-tty", "--json"])

        answers = json.loads(capsys.readouterr().out)
        assert answers == {"_": [], "name": "my-app", "framework": "vue", "port": 3000, "features": []}

    def test_set_values(self, questions_file: Path, capsys) -> None:
        main([
            "ask", str(questions_file), "my-app", "--no-tty", "--json",
            "-s", "framework=React",
            "-s", "port=8080",
            "-s", "features=Auth",
            "-s", "features=Cache",
        ])

        answers = json.loads(capsys.readouterr().out)
        assert answers["framework"] == "React"
        assert answers["port"] == 8080
        assert [f["name"] for f in answers["features"]] == ["Auth", "Cache"]

    def test_table_output(self, questions_file: Path, capsys) -> None:
        main(["ask", str(questions_file), "my-app", "extra", "--no-tty"])

        out = capsys.readouterr().out
        assert "Answers" in out
        assert "my-app" in out
        assert "Unused arguments: extra" in out

    def test_missing_required_exits(self, questions_file: Path, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["ask", str(questions_file), "--no-tty"])

        assert exc_info.value.code == 1
        assert "SYNOPSIS" in capsys.readouterr().out

    def test_use_defaults_from_config(self, questions_file: Path, tmp_path: Path, capsys) -> None:
        config = tmp_path / "prompter.yaml"
        config.write_text("no_tty: true\nuse_defaults: true\n")

        main(["ask", str(questions_file), "app", "-c", str(config), "--json"])

        assert json.loads(capsys.readouterr().out)["port"] == 3000

    def test_bad_question_file(self, tmp_path: Path, capsys) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("- type: slider\n  name: x\n")

        with pytest.raises(SystemExit) as exc_info:
            main(["ask", str(bad), "--no-tty"])

        assert exc_info.value.code == 1
        assert "Unknown question type" in capsys.readouterr().out

    def test_bad_set_value(self, questions_file: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["ask", str(questions_file), "--no-tty", "-s", "oops"])

        assert exc_info.value.code == 1


class TestMan:
    """Tests for the man command."""

    def test_reference_page(self, questions_file: Path, capsys) -> None:
        main(["man", str(questions_file), "--name", "make-app", "--author", "Ada"])

        out = capsys.readouterr().out
        assert "SYNOPSIS" in out
        assert "make-app --name <name>" in out
        assert "FRAMEWORK" in out
        assert "AUTHOR" in out

    def test_name_defaults_to_file_stem(self, questions_file: Path, capsys) -> None:
        main(["man", str(questions_file)])

        assert "questions --name <name>" in capsys.readouterr().out


class TestResolvers:
    """Tests for the resolvers command."""

    def test_lists_builtins(self, capsys) -> None:
        process = MagicMock(returncode=0)
        process.communicate = AsyncMock(return_value=(b"Ada\n", b""))
        with patch(
            "inquiry_engine.resolvers.builtin.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=process),
        ):
            main(["resolvers"])

        out = capsys.readouterr().out
        assert "date.year" in out
        assert "git.user.name" in out
        assert "Ada" in out


def test_no_command_prints_help(capsys) -> None:
    main([])

    assert "usage: inquiry-engine" in capsys.readouterr().out
