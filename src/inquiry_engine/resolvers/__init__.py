"""
Value resolvers for dynamic defaults, options and answers.

``create_default_registry()`` returns a fresh registry with the date, git
and workspace resolvers installed.
"""

from inquiry_engine.resolvers.builtin import DATE_RESOLVERS, GIT_RESOLVERS, git_config
from inquiry_engine.resolvers.registry import Resolver, ResolverRegistry
from inquiry_engine.resolvers.workspace import (
    WORKSPACE_RESOLVERS,
    WorkspaceInfo,
    find_workspace,
    parse_author,
    parse_github_url,
)


def create_default_registry() -> ResolverRegistry:
    """A new registry holding every built-in resolver."""
    registry = ResolverRegistry()
    for group in (DATE_RESOLVERS, GIT_RESOLVERS, WORKSPACE_RESOLVERS):
        for key, fn in group.items():
            registry.register(key, fn)
    return registry


__all__ = [
    "DATE_RESOLVERS",
    "GIT_RESOLVERS",
    "WORKSPACE_RESOLVERS",
    "Resolver",
    "ResolverRegistry",
    "WorkspaceInfo",
    "create_default_registry",
    "find_workspace",
    "git_config",
    "parse_author",
    "parse_github_url",
]
