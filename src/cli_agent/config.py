"""Session settings loaded from the environment and optional .env files."""

from __future__ import annotations

import contextlib
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv

from cli_agent.errors import StartupError
from cli_agent.paths import config_dir

logger = logging.getLogger(__name__)

ENV_PREFIX = "CLI_AGENT_"
THEME_NAMES = ("dark", "light")


def env_file() -> Path:
    return config_dir() / ".env"


def parse_bool(value: str | None, default: bool) -> bool:
    """Parse a truthy/falsy toggle from environment settings."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_int(value: str | None, default: int) -> int:
    """Parse an integer setting, returning the default on invalid input."""
    if value is None:
        return default
    with contextlib.suppress(ValueError):
        return int(value)
    return default


def parse_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    with contextlib.suppress(ValueError):
        return float(value)
    return default


@dataclass(frozen=True)
class Settings:
    """Immutable configuration for one interactive session.

    The state machine only reads these values; they never change once the
    session has started.
    """

    title: str = "CLI Agent"
    prompt: str = "❯ "
    placeholder: str = "Type a label and press enter"
    quit_command: str = "/exit"
    working_status: str = "Invoking LLM model..."
    success_status: str = "Done!"
    failure_status: str = "Done with error!"
    tick_interval: float = 1.0
    task_delay: float = 2.0
    spinner: str = "dot"
    theme: str = "dark"
    alt_screen: bool = True
    max_messages: int = 200
    demo_messages: bool = False

    def validate(self) -> "Settings":
        # Deferred: cli_agent.tui imports this module.
        from cli_agent.tui.spinner import SPINNERS

        if self.tick_interval <= 0:
            raise StartupError(f"tick interval must be positive, got {self.tick_interval}")
        if self.task_delay < 0:
            raise StartupError(f"task delay must not be negative, got {self.task_delay}")
        if self.spinner not in SPINNERS:
            available = ", ".join(sorted(SPINNERS))
            raise StartupError(f"unknown spinner {self.spinner!r}; available: {available}")
        if self.theme not in THEME_NAMES:
            raise StartupError(f"unknown theme {self.theme!r}; available: {', '.join(THEME_NAMES)}")
        if self.max_messages < 1:
            raise StartupError(f"max messages must be at least 1, got {self.max_messages}")
        if not self.quit_command.strip():
            raise StartupError("quit command must not be empty")
        return self


def settings_from_env(env: Mapping[str, str]) -> Settings:
    """Build settings from CLI_AGENT_* variables, falling back to defaults."""

    defaults = Settings()
    values: dict[str, Any] = {}
    for item in fields(Settings):
        raw = env.get(f"{ENV_PREFIX}{item.name.upper()}")
        if raw is None:
            continue
        default = getattr(defaults, item.name)
        if isinstance(default, bool):
            values[item.name] = parse_bool(raw, default)
        elif isinstance(default, int):
            values[item.name] = parse_int(raw, default)
        elif isinstance(default, float):
            values[item.name] = parse_float(raw, default)
        else:
            values[item.name] = raw
    return replace(defaults, **values)


def load_settings(env: Mapping[str, str] | None = None, **overrides: Any) -> Settings:
    """Load settings from .env files, the environment and explicit overrides.

    Priority: explicit overrides > environment > config-dir .env > local .env
    > defaults. Overrides set to None are ignored so argparse results can be
    passed straight through.
    """

    if env is None:
        load_dotenv(env_file(), override=False)
        load_dotenv()
        env = os.environ
    settings = settings_from_env(env)
    explicit = {key: value for key, value in overrides.items() if value is not None}
    if explicit:
        settings = replace(settings, **explicit)
    logger.debug("Loaded settings: %s", settings)
    return settings.validate()


__all__ = [
    "ENV_PREFIX",
    "Settings",
    "THEME_NAMES",
    "env_file",
    "load_settings",
    "parse_bool",
    "parse_float",
    "parse_int",
    "settings_from_env",
]
