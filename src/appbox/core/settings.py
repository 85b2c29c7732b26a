"""Launcher settings.

``LauncherSettings`` holds the few knobs the launcher itself owns.  Values
come from ``APPBOX_*`` environment variables or a ``.env`` file and can be
overridden by the launcher's own command-line options (the unclaimed
arguments that precede the first application name).

Examples:
    >>> import os
    >>> os.environ["APPBOX_LOG_LEVEL"] = "debug"
    >>> LauncherSettings().log_level
    'DEBUG'
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from appbox.core.errors import ConfigError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LauncherSettings(BaseSettings):
    """Settings for one launcher process.

    Fields
    ──────
    log_level       : Structlog log level
    json_logs       : JSON output (True), console (False), auto by TTY (None)
    service         : Service name stamped into every log line
    handle_signals  : Cancel the root context on SIGINT / SIGTERM
    """

    model_config = SettingsConfigDict(
        env_prefix="APPBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None
    service: str = Field(default="appbox", min_length=1)

    # ── Process ──────────────────────────────────────────────────
    handle_signals: bool = True

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return level

    def merged(self, **overrides: Any) -> LauncherSettings:
        """Return a validated copy with every non-None override applied."""
        update = {k: v for k, v in overrides.items() if v is not None}
        if not update:
            return self
        return load_settings(**{**self.model_dump(), **update})


def load_settings(**values: Any) -> LauncherSettings:
    """Build settings, converting validation failures to :class:`ConfigError`."""
    try:
        return LauncherSettings(**values)
    except ValidationError as e:
        raise ConfigError(f"invalid launcher settings: {e}", cause=e) from e


@lru_cache(maxsize=1)
def get_settings() -> LauncherSettings:
    """Return the process-wide settings read from the environment."""
    return load_settings()


def reset_settings() -> None:
    """Clear cached settings (tests, or after changing the environment)."""
    get_settings.cache_clear()


__all__ = [
    "LOG_LEVELS",
    "LauncherSettings",
    "get_settings",
    "load_settings",
    "reset_settings",
]
