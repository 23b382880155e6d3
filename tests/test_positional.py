"""Tests for positional argument assignment."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from inquiry_engine import MissingArgumentsError, Prompter, PromptOptions
from inquiry_engine.testing import CapturedOutput


def q(name: str, type: str = "text", **extra) -> dict:
    return {"_": True, "name": name, "type": type, **extra}


@pytest.fixture
def non_mutating_prompter(output: CapturedOutput, registry) -> Iterator[Prompter]:
    p = Prompter(no_tty=True, mutate_args=False, output=output, resolver_registry=registry)
    yield p
    p.close()


class TestBasicPositionals:
    @pytest.mark.asyncio
    async def test_single_positional(self, no_tty_prompter: Prompter) -> None:
        result = await no_tty_prompter.prompt({"_": ["mydb1"]}, [q("database", required=True)])

        assert result["database"] == "mydb1"

    @pytest.mark.asyncio
    async def test_declaration_order(self, no_tty_prompter: Prompter) -> None:
        questions = [q("foo"), {"name": "bar", "default": "default-bar"}, q("baz")]

        result = await no_tty_prompter.prompt({"_": ["1", "3"], "bar": "2"}, questions)

        assert (result["foo"], result["bar"], result["baz"]) == ("1", "2", "3")

    @pytest.mark.asyncio
    async def test_numeric_value(self, no_tty_prompter: Prompter) -> None:
        result = await no_tty_prompter.prompt({"_": [3000]}, [q("port", "number")])

        assert result["port"] == 3000

    @pytest.mark.asyncio
    async def test_empty_positionals(self, no_tty_prompter: Prompter) -> None:
        result = await no_tty_prompter.prompt({"_": []}, [q("foo", default="default-foo")])

        assert result["foo"] == "default-foo"

    @pytest.mark.asyncio
    async def test_missing_positional_key(self, no_tty_prompter: Prompter) -> None:
        result = await no_tty_prompter.prompt({}, [q("foo", default="default-foo")])

        assert result == {"foo": "default-foo"}


class TestNamedPrecedence:
    @pytest.mark.asyncio
    async def test_named_wins(self, no_tty_prompter: Prompter) -> None:
        result = await no_tty_prompter.prompt(
            {"_": ["positional-db"], "database": "named-db"}, [q("database")]
        )

        assert result["database"] == "named-db"
        assert result["_"] == ["positional-db"]

    @pytest.mark.asyncio
    async def test_named_question_does_not_consume(self, no_tty_prompter: Prompter) -> None:
        result = await no_tty_prompter.prompt({"_": ["first"], "foo": "named-foo"}, [q("foo"), q("bar")])

        assert result["foo"] == "named-foo"
        assert result["bar"] == "first"

    @pytest.mark.parametrize(
        ("named", "expected"),
        [
            ("first", {"first": "named", "second": "pos1", "third": "pos2"}),
            ("second", {"first": "pos1", "second": "named", "third": "pos2"}),
            ("third", {"first": "pos1", "second": "pos2", "third": "named"}),
        ],
    )
    @pytest.mark.asyncio
    async def test_named_anywhere_in_sequence(
        self, no_tty_prompter: Prompter, named: str, expected: dict
    ) -> None:
        questions = [q("first"), q("second"), q("third")]

        result = await no_tty_prompter.prompt({"_": ["pos1", "pos2"], named: "named"}, questions)

        assert {k: result[k] for k in expected} == expected
        assert result["_"] == []

    @pytest.mark.asyncio
    async def test_all_named_leaves_positionals(self, no_tty_prompter: Prompter) -> None:
        result = await no_tty_prompter.prompt(
            {"_": ["extra1", "extra2"], "foo": "named-foo", "bar": "named-bar"},
            [q("foo"), q("bar")],
        )

        assert result["_"] == ["extra1", "extra2"]


class TestExtraAndMissingValues:
    @pytest.mark.asyncio
    async def test_extras_remain(self, no_tty_prompter: Prompter) -> None:
        argv = {"_": ["value1", "value2", "value3"]}

        result = await no_tty_prompter.prompt(argv, [q("first")])

        assert result["first"] == "value1"
        assert result["_"] == ["value2", "value3"]
        assert argv["_"] == ["value2", "value3"]

    @pytest.mark.asyncio
    async def test_fewer_values_than_questions(self, no_tty_prompter: Prompter) -> None:
        questions = [
            q("first"),
            q("second", default="default-second"),
            q("third", default="default-third"),
        ]

        result = await no_tty_prompter.prompt({"_": ["only-one"]}, questions)

        assert result["first"] == "only-one"
        assert result["second"] == "default-second"
        assert result["third"] == "default-third"

    @pytest.mark.asyncio
    async def test_interleaved_with_named_questions(self, no_tty_prompter: Prompter) -> None:
        questions = [
            q("pos1"),
            {"name": "named1", "default": "default-named1"},
            q("pos2"),
            {"name": "named2", "default": "default-named2"},
            q("pos3"),
        ]

        result = await no_tty_prompter.prompt({"_": ["a", "b", "c"]}, questions)

        assert (result["pos1"], result["pos2"], result["pos3"]) == ("a", "b", "c")
        assert result["named1"] == "default-named1"
        assert result["named2"] == "default-named2"


class TestPositionalOptions:
    @pytest.mark.asyncio
    async def test_list_maps_name_to_value(self, no_tty_prompter: Prompter) -> None:
        options = [{"name": "React", "value": "react"}, {"name": "Vue", "value": "vue"}]

        result = await no_tty_prompter.prompt({"_": ["React"]}, [q("framework", "list", options=options)])

        assert result["framework"] == "react"

    @pytest.mark.asyncio
    async def test_autocomplete_maps_name_to_value(self, no_tty_prompter: Prompter) -> None:
        options = [{"name": "PostgreSQL", "value": "postgres"}, {"name": "SQLite", "value": "sqlite"}]

        result = await no_tty_prompter.prompt(
            {"_": ["PostgreSQL"]}, [q("database", "autocomplete", options=options)]
        )

        assert result["database"] == "postgres"

    @pytest.mark.asyncio
    async def test_custom_autocomplete_value(self, no_tty_prompter: Prompter) -> None:
        questions = [q("framework", "autocomplete", options=["React", "Vue"], allowCustomOptions=True)]

        result = await no_tty_prompter.prompt({"_": ["CustomFramework"]}, questions)

        assert result["framework"] == "CustomFramework"

    @pytest.mark.asyncio
    async def test_checkbox_single_value(self, no_tty_prompter: Prompter) -> None:
        questions = [q("features", "checkbox", options=["Auth", "Database", "API"])]

        result = await no_tty_prompter.prompt({"_": ["Auth"]}, questions)

        assert [o.to_dict() for o in result["features"]] == [
            {"name": "Auth", "value": "Auth", "selected": True},
        ]

    @pytest.mark.asyncio
    async def test_checkbox_full_results(self, no_tty_prompter: Prompter) -> None:
        questions = [q("features", "checkbox", options=["Auth", "Database", "API"], returnFullResults=True)]

        result = await no_tty_prompter.prompt({"_": ["Database"]}, questions)

        assert [(o.name, o.selected) for o in result["features"]] == [
            ("Auth", False),
            ("Database", True),
            ("API", False),
        ]


class TestMutateArgs:
    @pytest.mark.asyncio
    async def test_mutates_by_default(self, no_tty_prompter: Prompter) -> None:
        argv = {"_": ["value1", "extra"]}

        result = await no_tty_prompter.prompt(argv, [q("foo")])

        assert result is argv
        assert argv["foo"] == "value1"
        assert argv["_"] == ["extra"]

    @pytest.mark.asyncio
    async def test_prompter_setting(self, non_mutating_prompter: Prompter) -> None:
        argv = {"_": ["value1", "extra"]}

        result = await non_mutating_prompter.prompt(argv, [q("foo")])

        assert result["foo"] == "value1"
        assert result["_"] == ["extra"]
        assert argv == {"_": ["value1", "extra"]}

    @pytest.mark.asyncio
    async def test_per_call_option(self, no_tty_prompter: Prompter) -> None:
        argv = {"_": ["value1", "extra"]}

        result = await no_tty_prompter.prompt(argv, [q("foo")], PromptOptions(mutate_args=False))

        assert result["_"] == ["extra"]
        assert argv == {"_": ["value1", "extra"]}


class TestRequiredPositionals:
    @pytest.mark.asyncio
    async def test_satisfied_by_positional(self, no_tty_prompter: Prompter) -> None:
        result = await no_tty_prompter.prompt({"_": ["mydb"]}, [q("database", required=True)])

        assert result["database"] == "mydb"

    @pytest.mark.asyncio
    async def test_missing_raises(self, no_tty_prompter: Prompter) -> None:
        with pytest.raises(MissingArgumentsError, match="Missing required arguments"):
            await no_tty_prompter.prompt({"_": []}, [q("database", required=True)])


class TestPositionalEdgeCases:
    @pytest.mark.asyncio
    async def test_explicit_false_flag(self, no_tty_prompter: Prompter) -> None:
        questions = [
            q("pos"),
            {"_": False, "name": "notPos", "default": "default"},
            {"name": "alsoNotPos", "default": "also-default"},
        ]

        result = await no_tty_prompter.prompt({"_": ["positional-value"]}, questions)

        assert result["pos"] == "positional-value"
        assert result["notPos"] == "default"
        assert result["alsoNotPos"] == "also-default"

    @pytest.mark.asyncio
    async def test_empty_string_value(self, no_tty_prompter: Prompter) -> None:
        result = await no_tty_prompter.prompt({"_": [""]}, [q("foo")])

        assert result["foo"] == ""

    @pytest.mark.asyncio
    async def test_boolean_like_string(self, no_tty_prompter: Prompter) -> None:
        result = await no_tty_prompter.prompt({"_": ["true"]}, [q("flag")])

        assert result["flag"] == "true"

    @pytest.mark.asyncio
    async def test_mixed_scenario(self, no_tty_prompter: Prompter) -> None:
        questions = [
            q("source"),
            {"name": "verbose", "type": "confirm", "default": False},
            q("destination"),
            {"name": "format", "type": "list", "options": ["json", "xml", "csv"], "default": "json"},
            q("count", "number"),
        ]
        argv = {"_": ["input.txt", "output.txt", 42], "verbose": True, "format": "csv"}

        result = await no_tty_prompter.prompt(argv, questions)

        assert result["source"] == "input.txt"
        assert result["destination"] == "output.txt"
        assert result["count"] == 42
        assert result["verbose"] is True
        assert result["format"] == "csv"
