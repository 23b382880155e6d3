"""
Resolver registry.

Maps string keys (``"git.user.name"``, ``"date.year"``, ...) to callables
that compute a value on demand. Questions refer to keys through
``default_from``, ``set_from`` and ``options_from``.

Lookups are fail-open: an unknown key, a resolver returning ``None`` and a
resolver raising all resolve to ``None``.

Example:
    from inquiry_engine.resolvers import ResolverRegistry

    registry = ResolverRegistry()
    registry.register("team.name", lambda: "platform")

    value = await registry.resolve("team.name")
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterator
from typing import Any

from inquiry_engine.logging import get_logger

logger = get_logger("resolvers.registry")

# Type for resolver functions: () -> value | awaitable value
Resolver = Callable[[], "Any | Awaitable[Any]"]


class ResolverRegistry:
    """
    A registry of named value resolvers.

    Thread Safety:
        The registry is designed for single-threaded async usage.
        Registration and lookup are not protected by locks.
    """

    def __init__(self, resolvers: dict[str, Resolver] | None = None) -> None:
        self._resolvers: dict[str, Resolver] = {}
        for key, fn in (resolvers or {}).items():
            self.register(key, fn)

    def register(self, key: str, fn: Resolver) -> None:
        """
        Register *fn* under *key*, replacing any existing resolver.

        Args:
            key: Resolver key, conventionally dotted (``"git.user.name"``)
            fn: Zero-argument callable, sync or async

        Raises:
            ValueError: If key is empty or fn is not callable
        """
        if not key:
            raise ValueError("Resolver key must not be empty")
        if not callable(fn):
            raise ValueError(f"Resolver for {key!r} must be callable")

        if key in self._resolvers:
            logger.debug("Overriding resolver: %s", key)
        self._resolvers[key] = fn

    def unregister(self, key: str) -> bool:
        """
        Remove a resolver.

        Returns:
            True if the key was registered
        """
        if key not in self._resolvers:
            return False
        del self._resolvers[key]
        logger.debug("Unregistered resolver: %s", key)
        return True

    def has(self, key: str) -> bool:
        return key in self._resolvers

    def keys(self) -> list[str]:
        """Registered keys in registration order."""
        return list(self._resolvers)

    async def resolve(self, key: str) -> Any:
        """
        Compute the value for *key*.

        Never raises; failures are logged at debug level and yield ``None``.
        """
        fn = self._resolvers.get(key)
        if fn is None:
            logger.debug("No resolver registered for %s", key)
            return None

        try:
            result = fn()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.debug("Resolver %s failed: %s", key, e)
            return None

        return result

    def copy(self) -> ResolverRegistry:
        """A new registry with the same resolvers."""
        return ResolverRegistry(dict(self._resolvers))

    def __contains__(self, key: object) -> bool:
        return key in self._resolvers

    def __len__(self) -> int:
        return len(self._resolvers)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._resolvers))

    def __repr__(self) -> str:
        return f"ResolverRegistry({len(self._resolvers)} resolvers)"
