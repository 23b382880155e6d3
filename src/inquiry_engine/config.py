"""
Configuration for the prompter.

Settings can be loaded from YAML files, plain dicts or the environment,
or constructed programmatically.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from inquiry_engine.errors import ConfigurationError

_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str) -> bool | None:
    """Read a boolean environment variable; ``None`` when unset."""
    val = os.environ.get(name)
    if val is None:
        return None
    return val.strip().lower() in _TRUTHY


@dataclass
class PrompterConfig:
    """
    Settings for :class:`~inquiry_engine.prompter.Prompter`.

    Example YAML:
        no_tty: false
        use_defaults: false
        global_max_lines: 8
        mutate_args: true
        clear_screen: true
        log_level: DEBUG
    """

    no_tty: bool = False  # Never prompt; fall back to defaults
    use_defaults: bool = False  # Take declared defaults without asking
    global_max_lines: int = 10  # Visible options in select prompts
    mutate_args: bool = True  # Write answers into the caller's dict
    clear_screen: bool = True  # Clear before each interactive screen
    log_level: str | None = None  # Passed to setup_logging when set

    def __post_init__(self) -> None:
        if self.global_max_lines < 1:
            raise ConfigurationError("global_max_lines must be at least 1")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PrompterConfig:
        """Create config from a dictionary."""
        try:
            max_lines = int(data.get("global_max_lines", 10))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid global_max_lines: {e}") from e

        return cls(
            no_tty=bool(data.get("no_tty", False)),
            use_defaults=bool(data.get("use_defaults", False)),
            global_max_lines=max_lines,
            mutate_args=bool(data.get("mutate_args", True)),
            clear_screen=bool(data.get("clear_screen", True)),
            log_level=data.get("log_level"),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> PrompterConfig:
        """Load config from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_yaml_string(cls, content: str) -> PrompterConfig:
        """Load config from a YAML string."""
        data = yaml.safe_load(content)
        return cls.from_dict(data or {})

    @classmethod
    def from_env(cls, base: PrompterConfig | None = None) -> PrompterConfig:
        """
        Overlay ``INQUIRY_NO_TTY``, ``INQUIRY_USE_DEFAULTS`` and
        ``INQUIRY_MAX_LINES`` on *base* (or the defaults).
        """
        data = (base or cls()).to_dict()

        no_tty = _env_flag("INQUIRY_NO_TTY")
        if no_tty is not None:
            data["no_tty"] = no_tty
        use_defaults = _env_flag("INQUIRY_USE_DEFAULTS")
        if use_defaults is not None:
            data["use_defaults"] = use_defaults
        max_lines = os.environ.get("INQUIRY_MAX_LINES")
        if max_lines:
            data["global_max_lines"] = max_lines

        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return {
            "no_tty": self.no_tty,
            "use_defaults": self.use_defaults,
            "global_max_lines": self.global_max_lines,
            "mutate_args": self.mutate_args,
            "clear_screen": self.clear_screen,
            "log_level": self.log_level,
        }
