"""
Tests for the logging module.

Tests verify:
- JSON output carries service metadata and ECS field names
- Events reach stdlib logging and stay quiet before configuration
- DEBUG logs are suppressed at INFO level
"""

from __future__ import annotations

import json
import logging

from sqlchain.adapters import SQLiteAdapter
from sqlchain.logging import configure_logging, get_logger
from sqlchain.session import Session
from sqlchain.settings import DatabaseSettings


def _json_records(caplog) -> list[dict]:
    return [json.loads(record.getMessage()) for record in caplog.records]


class TestConfigureLogging:
    def test_json_output(self, caplog) -> None:
        caplog.set_level(logging.INFO)
        configure_logging("INFO", json_format=True, service="shop-api")
        get_logger("tests.json").info("statement_executed", table="posts")

        (record,) = _json_records(caplog)
        assert record["event"] == "statement_executed"
        assert record["table"] == "posts"
        assert record["service.name"] == "shop-api"
        assert record["log.level"] == "info"
        assert "@timestamp" in record

    def test_without_timestamp(self, caplog) -> None:
        caplog.set_level(logging.INFO)
        configure_logging("INFO", json_format=True, add_timestamp=False)
        get_logger("tests.nots").info("ping")

        (record,) = _json_records(caplog)
        assert "@timestamp" not in record

    def test_debug_suppressed_at_info(self, caplog) -> None:
        caplog.set_level(logging.DEBUG)
        configure_logging("INFO", json_format=True)
        logger = get_logger("tests.level")
        logger.debug("hidden")
        logger.info("shown")

        assert [r["event"] for r in _json_records(caplog)] == ["shown"]

    def test_console_renderer(self, caplog) -> None:
        caplog.set_level(logging.INFO)
        configure_logging("INFO", json_format=False)
        get_logger("tests.console").info("session_connected", backend="sqlite")

        assert "session_connected" in caplog.records[0].getMessage()

    def test_from_settings(self, caplog) -> None:
        caplog.set_level(logging.DEBUG)
        DatabaseSettings(_env_file=None, log_level="warning", log_json=True).configure_logging()
        logger = get_logger("tests.settings")
        logger.info("hidden")
        logger.warning("shown")

        assert [r["event"] for r in _json_records(caplog)] == ["shown"]


class TestUnconfigured:
    def test_debug_not_printed(self, capsys) -> None:
        with Session(SQLiteAdapter()) as sess:
            sess.run("SELECT 1")
        assert capsys.readouterr().out == ""

    def test_events_reach_stdlib_logger(self, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger="tests.stdlib")
        get_logger("tests.stdlib").debug("statement_executed", params=0)

        (record,) = caplog.records
        assert record.name == "tests.stdlib"
        assert record.levelno == logging.DEBUG
        assert "statement_executed" in record.getMessage()

    def test_warning_level_passes_through(self, caplog) -> None:
        get_logger("tests.warn").warning("statement_failed")
        assert [r.levelname for r in caplog.records if r.name == "tests.warn"] == ["WARNING"]
