"""
Tests for the logging module.

Tests verify:
- JSON output carries service metadata and ECS field names
- DEBUG logs are suppressed at INFO level
- Settings drive level and renderer
"""

import json
import logging

import pytest
import structlog

from taskbeat import TaskbeatSettings
from taskbeat.logging import configure_from_settings, configure_logging, get_logger


@pytest.fixture(autouse=True)
def _restore_logging(monkeypatch):
    monkeypatch.setattr("taskbeat.logging._SERVICE_NAME", "taskbeat")
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


def _json_lines(err: str) -> list[dict]:
    return [json.loads(line) for line in err.splitlines() if line.startswith("{")]


class TestConfigureLogging:
    def test_json_output(self, capsys):
        configure_logging(level="INFO", json_format=True, service="billing-worker")
        get_logger("taskbeat.test").info("task_run_started", task="report@jobs.send", count=3)

        records = _json_lines(capsys.readouterr().err)
        assert len(records) == 1
        record = records[0]
        assert record["event"] == "task_run_started"
        assert record["task"] == "report@jobs.send"
        assert record["count"] == 3
        assert record["service.name"] == "billing-worker"
        assert record["log.level"] == "info"
        assert record["logger"] == "taskbeat.test"
        assert "@timestamp" in record

    def test_debug_suppressed_at_info(self, capsys):
        configure_logging(level="INFO", json_format=True)
        logger = get_logger("taskbeat.test")
        logger.debug("hidden")
        logger.warning("shown")

        events = [r["event"] for r in _json_lines(capsys.readouterr().err)]
        assert events == ["shown"]

    def test_without_timestamp(self, capsys):
        configure_logging(level="INFO", json_format=True, add_timestamp=False)
        get_logger("taskbeat.test").info("tick")

        record = _json_lines(capsys.readouterr().err)[0]
        assert "@timestamp" not in record

    def test_console_output(self, capsys):
        configure_logging(level="INFO", json_format=False)
        get_logger("taskbeat.test").info("scheduler_started", tasks=2)

        err = capsys.readouterr().err
        assert "scheduler_started" in err
        assert "tasks=2" in err


class TestConfigureFromSettings:
    def test_settings_drive_level_and_format(self, capsys):
        configure_from_settings(TaskbeatSettings(log_level="debug", log_format="json"))
        get_logger("taskbeat.test").debug("task_scheduled", task="a@b.c")

        records = _json_lines(capsys.readouterr().err)
        assert [r["event"] for r in records] == ["task_scheduled"]
        assert records[0]["log.level"] == "debug"
