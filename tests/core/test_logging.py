"""Tests for structured logging configuration."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from appbox.core.logging import LogContext, clear_context, configure_logging, get_logger


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    clear_context()
    structlog.reset_defaults()


def _last_json_line(capsys) -> dict:
    out = capsys.readouterr().out.strip().splitlines()
    return json.loads(out[-1])


class TestJsonLogging:
    def test_ecs_fields(self, capsys):
        configure_logging(level="INFO", json_format=True, service="box")
        get_logger("test").info("launch.partitioned", apps=["api"])
        record = _last_json_line(capsys)
        assert record["event"] == "launch.partitioned"
        assert record["service.name"] == "box"
        assert record["log.level"] == "info"
        assert "@timestamp" in record
        assert record["apps"] == ["api"]

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        get_logger("test").info("hidden")
        assert capsys.readouterr().out == ""

    def test_log_context_binds_and_unbinds(self, capsys):
        configure_logging(level="INFO", json_format=True)
        logger = get_logger("test")
        with LogContext(app="api"):
            logger.info("inside")
            assert _last_json_line(capsys)["app"] == "api"
        logger.info("outside")
        assert "app" not in _last_json_line(capsys)

    @pytest.mark.asyncio
    async def test_async_log_context(self, capsys):
        configure_logging(level="INFO", json_format=True)
        async with LogContext(app="worker"):
            get_logger("test").info("inside")
        assert _last_json_line(capsys)["app"] == "worker"


class TestConsoleLogging:
    def test_console_renderer(self, capsys):
        configure_logging(level="DEBUG", json_format=False)
        get_logger("test").debug("hello", key="value")
        out = capsys.readouterr().out
        assert "hello" in out
        assert "key" in out

    def test_console_renderer_shows_logger_name(self, capsys):
        configure_logging(level="INFO", json_format=False)
        get_logger("appbox.launch").info("hello")
        assert "appbox.launch" in capsys.readouterr().out


class TestLoggerName:
    """get_logger(name) binds the name without clashing with structlog's own arguments."""

    def test_name_in_json_line(self, capsys):
        configure_logging(level="INFO", json_format=True)
        get_logger("test").info("named")
        record = _last_json_line(capsys)
        assert record["logger_name"] == "test"

    def test_module_level_loggers_import(self):
        import appbox.cli.app
        import appbox.execution.group

        assert appbox.cli.app.logger is not None
        assert appbox.execution.group.logger is not None

    def test_explicit_value_wins(self, capsys):
        configure_logging(level="INFO", json_format=True)
        get_logger("test", logger_name="override", app="api").info("named")
        record = _last_json_line(capsys)
        assert record["logger_name"] == "override"
        assert record["app"] == "api"


class TestReconfigure:
    """configure_logging() can be called again with a different level."""

    def test_root_level_follows_second_call(self):
        configure_logging(level="INFO", json_format=True)
        assert logging.getLogger().level == logging.INFO
        configure_logging(level="DEBUG", json_format=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_structlog_filter_follows_second_call(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        get_logger("test").debug("hidden")
        assert capsys.readouterr().out == ""
        configure_logging(level="DEBUG", json_format=True)
        get_logger("test").debug("shown")
        assert _last_json_line(capsys)["event"] == "shown"
