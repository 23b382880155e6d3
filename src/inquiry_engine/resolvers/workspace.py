"""
Workspace resolvers.

Values come from the nearest project manifest found by walking up from the
current working directory: ``pyproject.toml`` (its PEP 621 ``[project]``
table) or ``package.json``. The first directory holding either file wins;
``pyproject.toml`` is preferred when both are present.
"""

from __future__ import annotations

import json
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from inquiry_engine.logging import get_logger
from inquiry_engine.resolvers.registry import Resolver

logger = get_logger("resolvers.workspace")

_SSH_URL = re.compile(r"git@github\.com:([^/]+)/([^/.]+)(?:\.git)?")
_HTTPS_URL = re.compile(r"(?:https?|git|git\+https)://github\.com/([^/]+)/([^/.]+)(?:\.git)?")
_REPO_URL_KEYS = ("repository", "Repository", "source", "Source", "homepage", "Homepage")


@dataclass
class WorkspaceInfo:
    """The fields the workspace resolvers expose."""

    name: str | None = None
    license: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    repository_url: str | None = None


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def parse_author(author: Any) -> tuple[str | None, str | None]:
    """
    Split an author entry into ``(name, email)``.

    Accepts ``"Name <email> (url)"`` strings and ``{"name", "email"}``
    mappings.
    """
    if not author:
        return None, None
    if isinstance(author, dict):
        return author.get("name"), author.get("email")
    if not isinstance(author, str):
        return None, None

    name_match = re.match(r"^([^<(]+)", author)
    email_match = re.search(r"<([^>]+)>", author)
    name = name_match.group(1).strip() if name_match else None
    return name or None, email_match.group(1) if email_match else None


def parse_github_url(url: str | None) -> tuple[str | None, str | None]:
    """Return ``(organization, repo name)`` for a GitHub URL."""
    if not url:
        return None, None
    match = _SSH_URL.search(url) or _HTTPS_URL.search(url)
    if match is None:
        return None, None
    return match.group(1), match.group(2)


def _license_text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return value.get("text") or value.get("file")
    return None


def _from_pyproject(path: Path) -> WorkspaceInfo:
    with path.open("rb") as f:
        data = tomllib.load(f)

    project = data.get("project", {})
    authors = project.get("authors") or []
    author_name, author_email = parse_author(authors[0] if authors else None)

    urls = project.get("urls") or {}
    repository = next((urls[key] for key in _REPO_URL_KEYS if key in urls), None)

    return WorkspaceInfo(
        name=project.get("name"),
        license=_license_text(project.get("license")),
        author_name=author_name,
        author_email=author_email,
        repository_url=repository,
    )


def _from_package_json(path: Path) -> WorkspaceInfo:
    data = json.loads(path.read_text(encoding="utf-8"))

    author_name, author_email = parse_author(data.get("author"))
    repository = data.get("repository")
    if isinstance(repository, dict):
        repository = repository.get("url")

    return WorkspaceInfo(
        name=data.get("name"),
        license=data.get("license"),
        author_name=author_name,
        author_email=author_email,
        repository_url=repository if isinstance(repository, str) else None,
    )


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def find_workspace(start: Path | None = None) -> WorkspaceInfo | None:
    """
    Read the nearest manifest at or above *start* (default: cwd).

    Returns ``None`` when no manifest is found or the nearest one cannot be
    parsed.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        pyproject = directory / "pyproject.toml"
        package_json = directory / "package.json"
        try:
            if pyproject.is_file():
                info = _from_pyproject(pyproject)
                # Tool-only pyproject files carry no [project] table
                if info.name is None and package_json.is_file():
                    return _from_package_json(package_json)
                return info
            if package_json.is_file():
                return _from_package_json(package_json)
        except (OSError, ValueError) as e:
            logger.debug("Cannot read workspace manifest in %s: %s", directory, e)
            return None
    return None


def _field(getter):
    def resolve() -> Any:
        info = find_workspace()
        if info is None:
            return None
        return getter(info)

    return resolve


WORKSPACE_RESOLVERS: dict[str, Resolver] = {
    "workspace.name": _field(lambda info: info.name),
    "workspace.license": _field(lambda info: info.license),
    "workspace.author": _field(lambda info: info.author_name),
    "workspace.author.name": _field(lambda info: info.author_name),
    "workspace.author.email": _field(lambda info: info.author_email),
    "workspace.repo.name": _field(lambda info: parse_github_url(info.repository_url)[1]),
    "workspace.repo.organization": _field(lambda info: parse_github_url(info.repository_url)[0]),
}
