"""
Shared pytest fixtures for taskbeat tests.

This module provides:
- Settings isolation (cached settings cleared around every test)
- A frozen, steppable clock patched into the task module
- A polling helper for assertions on background threads
"""

import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from taskbeat import TaskbeatSettings, clear_settings_cache

# Wednesday, noon UTC
FROZEN_NOW = datetime(2024, 1, 17, 12, 0, tzinfo=UTC)


class FrozenClock:
    """Callable stand-in for ``utc_now()`` that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Keep TASKBEAT_* variables and the settings cache out of other tests."""
    for name in (
        "TASKBEAT_TIMEZONE",
        "TASKBEAT_TICK_INTERVAL_SECONDS",
        "TASKBEAT_RUN_GUARD_TIMEOUT_MS",
        "TASKBEAT_LOG_LEVEL",
        "TASKBEAT_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def utc_settings() -> TaskbeatSettings:
    """Settings anchored to UTC so calendar assertions are deterministic."""
    return TaskbeatSettings(timezone="UTC")


@pytest.fixture
def clock(monkeypatch) -> FrozenClock:
    """Freeze the task clock at FROZEN_NOW."""
    frozen = FrozenClock(FROZEN_NOW)
    monkeypatch.setattr("taskbeat.task.utc_now", frozen)
    return frozen


def noop() -> None:
    pass
