"""
Centralized settings for taskbeat.

One validated settings object carries everything that used to be
process-wide mutable state: the time-zone location used by every anchor
computation, the tick interval of the dispatch loop and the run-guard
timeout. Pass a ``TaskbeatSettings`` to builders and to ``Scheduler``; when
none is passed, the cached instance from ``get_settings()`` is used.

All fields can be set via ``TASKBEAT_*`` environment variables (e.g.
``TASKBEAT_TIMEZONE=Europe/Berlin``) or a ``.env`` file.

Examples:
    >>> settings = TaskbeatSettings(timezone="UTC")
    >>> settings.location
    zoneinfo.ZoneInfo(key='UTC')
    >>> TaskbeatSettings().location is None  # system local time
    True

Tags:
    taskbeat, configuration, settings, pydantic, timezone
"""

from __future__ import annotations

from datetime import timedelta
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError


class TaskbeatSettings(BaseSettings):
    """Taskbeat configuration.

    Fields
    ──────
    timezone              : IANA zone for time-of-day anchors (None = local)
    tick_interval_seconds : Dispatch loop period
    run_guard_timeout_ms  : How long ``Task.run()`` waits for its guard
    log_level             : Structlog log level
    log_format            : ``console`` or ``json``
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKBEAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Scheduling ───────────────────────────────────────────────
    timezone: str | None = Field(
        default=None,
        description="IANA time zone for daily/weekly anchors; system local time if unset",
    )
    tick_interval_seconds: float = Field(default=1.0, gt=0)
    run_guard_timeout_ms: float = Field(default=1.0, gt=0)

    # ── Observability ────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown time zone: {value!r}") from exc
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @property
    def location(self) -> ZoneInfo | None:
        """Time-zone location for anchors, or None for system local time."""
        if self.timezone is None:
            return None
        return ZoneInfo(self.timezone)

    @property
    def run_guard_timeout(self) -> timedelta:
        return timedelta(milliseconds=self.run_guard_timeout_ms)


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, TaskbeatSettings] = {}


def get_settings(*, _force_reload: bool = False) -> TaskbeatSettings:
    """Load, validate, and cache the default :class:`TaskbeatSettings`.

    Raises:
        ConfigError: if the environment holds invalid values
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    try:
        settings = TaskbeatSettings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid taskbeat configuration: {exc}", cause=exc) from exc

    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
