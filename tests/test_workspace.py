"""Tests for workspace manifest discovery."""

from __future__ import annotations

import json
from pathlib import Path
from textwrap import dedent

import pytest

from inquiry_engine.resolvers import create_default_registry
from inquiry_engine.resolvers.workspace import find_workspace, parse_author, parse_github_url


def _write_pyproject(directory: Path, body: str) -> None:
    (directory / "pyproject.toml").write_text(dedent(body))


class TestParseAuthor:
    def test_full_string(self) -> None:
        assert parse_author("Ada Lovelace <ada@example.com> (https://ada.dev)") == (
            "Ada Lovelace",
            "ada@example.com",
        )

    def test_name_only(self) -> None:
        assert parse_author("Ada") == ("Ada", None)

    def test_mapping(self) -> None:
        assert parse_author({"name": "Ada", "email": "ada@example.com"}) == ("Ada", "ada@example.com")

    def test_empty(self) -> None:
        assert parse_author(None) == (None, None)
        assert parse_author("") == (None, None)


class TestParseGithubUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/acme/widgets",
            "https://github.com/acme/widgets.git",
            "git+https://github.com/acme/widgets.git",
            "git@github.com:acme/widgets.git",
        ],
    )
    def test_variants(self, url: str) -> None:
        assert parse_github_url(url) == ("acme", "widgets")

    def test_other_hosts(self) -> None:
        assert parse_github_url("https://gitlab.com/acme/widgets") == (None, None)
        assert parse_github_url(None) == (None, None)


class TestFindWorkspace:
    def test_pyproject(self, tmp_path: Path) -> None:
        _write_pyproject(tmp_path, """\
            [project]
            name = "widgets"
            license = {text = "MIT"}
            authors = [{name = "Ada", email = "ada@example.com"}]

            [project.urls]
            Repository = "https://github.com/acme/widgets"
        """)

        info = find_workspace(tmp_path)

        assert info is not None
        assert info.name == "widgets"
        assert info.license == "MIT"
        assert info.author_name == "Ada"
        assert info.author_email == "ada@example.com"
        assert info.repository_url == "https://github.com/acme/widgets"

    def test_package_json(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text(json.dumps({
            "name": "web-app",
            "license": "Apache-2.0",
            "author": "Grace <grace@example.com>",
            "repository": {"type": "git", "url": "git+https://github.com/acme/web-app.git"},
        }))

        info = find_workspace(tmp_path)

        assert info is not None
        assert info.name == "web-app"
        assert info.author_name == "Grace"
        assert info.repository_url == "git+https://github.com/acme/web-app.git"

    def test_pyproject_preferred_over_package_json(self, tmp_path: Path) -> None:
        _write_pyproject(tmp_path, """\
            [project]
            name = "python-side"
        """)
        (tmp_path / "package.json").write_text(json.dumps({"name": "node-side"}))

        assert find_workspace(tmp_path).name == "python-side"

    def test_tool_only_pyproject_falls_back_to_package_json(self, tmp_path: Path) -> None:
        _write_pyproject(tmp_path, """\
            [tool.black]
            line-length = 100
        """)
        (tmp_path / "package.json").write_text(json.dumps({"name": "node-side", "license": "MIT"}))

        info = find_workspace(tmp_path)

        assert info.name == "node-side"
        assert info.license == "MIT"

    def test_tool_only_pyproject_alone(self, tmp_path: Path) -> None:
        _write_pyproject(tmp_path, """\
            [tool.black]
            line-length = 100
        """)

        assert find_workspace(tmp_path).name is None

    def test_walks_up_to_nearest_manifest(self, tmp_path: Path) -> None:
        _write_pyproject(tmp_path, """\
            [project]
            name = "root"
        """)
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)

        assert find_workspace(nested).name == "root"

    def test_unparseable_manifest(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text("{not json")

        assert find_workspace(tmp_path) is None


class TestWorkspaceResolvers:
    @pytest.mark.asyncio
    async def test_values_from_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "package.json").write_text(json.dumps({
            "name": "web-app",
            "license": "MIT",
            "author": {"name": "Grace", "email": "grace@example.com"},
            "repository": "https://github.com/acme/web-app",
        }))
        monkeypatch.chdir(tmp_path)
        registry = create_default_registry()

        assert await registry.resolve("workspace.name") == "web-app"
        assert await registry.resolve("workspace.license") == "MIT"
        assert await registry.resolve("workspace.author") == "Grace"
        assert await registry.resolve("workspace.author.name") == "Grace"
        assert await registry.resolve("workspace.author.email") == "grace@example.com"
        assert await registry.resolve("workspace.repo.name") == "web-app"
        assert await registry.resolve("workspace.repo.organization") == "acme"

    @pytest.mark.asyncio
    async def test_missing_fields_resolve_none(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_pyproject(tmp_path, """\
            [project]
            name = "bare"
        """)
        monkeypatch.chdir(tmp_path)
        registry = create_default_registry()

        assert await registry.resolve("workspace.name") == "bare"
        assert await registry.resolve("workspace.license") is None
        assert await registry.resolve("workspace.repo.name") is None
