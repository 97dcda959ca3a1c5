# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for structured logging setup."""

import json
import logging

import pytest
import structlog

from src.core.config.settings import Settings
from src.utils.logging import bind_context, reset_context, setup_logging


@pytest.fixture
def json_settings() -> Settings:
    """Settings that select the JSON renderer."""
    return Settings(environment="staging", debug=False, log_level="INFO")


def _records(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.strip()]


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_service_records_rendered_as_json(self, json_settings, capsys) -> None:
        """Test stdlib records from service modules come out as JSON."""
        setup_logging(json_settings)

        logging.getLogger("src.domains.student.service").info(
            "Student created: %s", "S100", extra={"user_id": "user-1"}
        )

        (record,) = _records(capsys.readouterr().out)
        assert record["event"] == "Student created: S100"
        assert record["level"] == "info"
        assert record["logger"] == "src.domains.student.service"
        assert record["user_id"] == "user-1"
        assert "timestamp" in record

    def test_level_filters_records(self, json_settings, capsys) -> None:
        """Test records below the configured level are dropped."""
        setup_logging(json_settings)

        logging.getLogger("src.bootstrap").debug("hidden")

        assert capsys.readouterr().out == ""

    def test_driver_loggers_quieted(self, capsys) -> None:
        """Test driver loggers stay at WARNING even in debug mode."""
        setup_logging(Settings(environment="development", log_level="DEBUG"))

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("asyncpg").level == logging.WARNING

    def test_repeated_setup_keeps_one_handler(self, json_settings, capsys) -> None:
        """Test calling setup twice does not duplicate output."""
        setup_logging(json_settings)
        setup_logging(json_settings)

        logging.getLogger("src").warning("once")

        assert len(_records(capsys.readouterr().out)) == 1


class TestContext:
    """Tests for unit-of-work context binding."""

    def test_bound_context_in_records(self, json_settings, capsys) -> None:
        """Test bound values appear until the context is reset."""
        setup_logging(json_settings)
        log = logging.getLogger("src.domains.records.service")

        tokens = bind_context(unit_of_work="abc123")
        log.info("inside")
        reset_context(tokens)
        log.info("outside")

        inside, outside = _records(capsys.readouterr().out)
        assert inside["unit_of_work"] == "abc123"
        assert "unit_of_work" not in outside

    def test_reset_restores_outer_value(self) -> None:
        """Test nested bindings restore the enclosing value."""
        outer = bind_context(unit_of_work="outer")
        inner = bind_context(unit_of_work="inner")

        reset_context(inner)
        assert structlog.contextvars.get_contextvars()["unit_of_work"] == "outer"

        reset_context(outer)
        assert "unit_of_work" not in structlog.contextvars.get_contextvars()
