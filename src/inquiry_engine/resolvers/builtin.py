"""Date and git resolvers."""

from __future__ import annotations

import asyncio
from datetime import datetime

from inquiry_engine.logging import get_logger
from inquiry_engine.resolvers.registry import Resolver

logger = get_logger("resolvers.builtin")

GIT_TIMEOUT = 5.0


def _now() -> datetime:
    return datetime.now()


async def git_config(key: str) -> str | None:
    """Read ``git config --global <key>``; ``None`` if git or the key is missing."""
    try:
        process = await asyncio.create_subprocess_exec(
            "git", "config", "--global", key,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.debug("git config %s unavailable: %s", key, e)
        return None

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=GIT_TIMEOUT)
    except asyncio.TimeoutError:
        logger.debug("git config %s timed out after %ss", key, GIT_TIMEOUT)
        process.kill()
        await process.wait()
        return None

    if process.returncode != 0:
        return None
    value = stdout.decode("utf-8", errors="replace").strip()
    return value or None


DATE_RESOLVERS: dict[str, Resolver] = {
    "date.year": lambda: str(_now().year),
    "date.month": lambda: f"{_now().month:02d}",
    "date.day": lambda: f"{_now().day:02d}",
    "date.iso": lambda: _now().date().isoformat(),
    "date.now": lambda: _now().isoformat(),
    "date.timestamp": lambda: str(int(_now().timestamp() * 1000)),
}

GIT_RESOLVERS: dict[str, Resolver] = {
    "git.user.name": lambda: git_config("user.name"),
    "git.user.email": lambda: git_config("user.email"),
}
