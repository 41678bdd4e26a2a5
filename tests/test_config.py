"""Tests for configuration loading and logging setup."""

import json
import logging
import sys
from decimal import Decimal

import pytest
from pydantic import ValidationError

from finplan.core.config import EngineConfig, load_config
from finplan.logging_config import ROOT_LOGGER, JSONFormatter, get_logger, setup_logging


@pytest.fixture
def clean_env(monkeypatch):
    for name in EngineConfig.model_fields:
        monkeypatch.delenv(f"FINPLAN_{name.upper()}", raising=False)
    return monkeypatch


@pytest.fixture
def finplan_logger():
    logger = logging.getLogger(ROOT_LOGGER)
    yield logger
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self, clean_env) -> None:
        config = load_config()
        assert config.currency == "USD"
        assert config.budget_tolerance == Decimal("0.05")
        assert config.current_age == 30
        assert config.log_json is False

    def test_environment_overrides(self, clean_env) -> None:
        clean_env.setenv("FINPLAN_CURRENCY", "EUR")
        clean_env.setenv("FINPLAN_BUDGET_TOLERANCE", "0.1")
        clean_env.setenv("FINPLAN_CURRENT_AGE", "45")
        clean_env.setenv("FINPLAN_LOG_JSON", "yes")

        config = load_config()

        assert config.currency == "EUR"
        assert config.budget_tolerance == Decimal("0.1")
        assert config.current_age == 45
        assert config.log_json is True

    def test_explicit_overrides_win(self, clean_env) -> None:
        clean_env.setenv("FINPLAN_LOG_LEVEL", "INFO")
        assert load_config(log_level="DEBUG").log_level == "DEBUG"

    def test_none_overrides_ignored(self, clean_env) -> None:
        clean_env.setenv("FINPLAN_LOG_LEVEL", "INFO")
        assert load_config(log_level=None).log_level == "INFO"

    @pytest.mark.parametrize(
        ("name", "value"),
        [("FINPLAN_CURRENCY", "euro"), ("FINPLAN_BUDGET_TOLERANCE", "2"), ("FINPLAN_CURRENT_AGE", "old")],
    )
    def test_invalid_values_fail(self, clean_env, name: str, value: str) -> None:
        clean_env.setenv(name, value)
        with pytest.raises(ValidationError):
            load_config()


class TestLogging:
    """Tests for logger naming, formatting and setup."""

    def test_get_logger_prefixes_namespace(self) -> None:
        assert get_logger("custom").name == "finplan.custom"
        assert get_logger("finplan.repository").name == "finplan.repository"
        assert get_logger("finplan").name == "finplan"

    def test_json_formatter(self) -> None:
        record = logging.LogRecord("finplan.test", logging.INFO, __file__, 10, "hello %s", ("world",), None)
        record.plan_id = "plan-1"
        record.month = "2025-02"

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "finplan.test"
        assert data["message"] == "hello world"
        assert data["line"] == 10
        assert data["extra"] == {"plan_id": "plan-1", "month": "2025-02"}
        assert "exception" not in data

    def test_json_formatter_skips_foreign_attributes(self) -> None:
        """Attributes added by other handlers or frameworks stay out of the output."""
        record = logging.LogRecord("finplan.test", logging.INFO, __file__, 10, "hello", (), None)
        record.color_message = "[bold]hello[/bold]"
        record.request = object()

        data = json.loads(JSONFormatter().format(record))

        assert "extra" not in data

    def test_json_formatter_exception(self) -> None:
        try:
            raise ValueError("bad month")
        except ValueError:
            exc_info = sys.exc_info()
        record = logging.LogRecord("finplan.test", logging.ERROR, __file__, 1, "failed", (), exc_info)

        data = json.loads(JSONFormatter().format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad month"
        assert "Traceback" in data["exception"]["traceback"]

    def test_setup_logging_single_handler(self, finplan_logger) -> None:
        setup_logging(EngineConfig(log_level="debug"))
        setup_logging(EngineConfig(log_level="debug"))

        assert len(finplan_logger.handlers) == 1
        assert finplan_logger.level == logging.DEBUG
        assert not isinstance(finplan_logger.handlers[0].formatter, JSONFormatter)

    def test_setup_logging_json(self, finplan_logger) -> None:
        setup_logging(EngineConfig(log_json=True))
        assert isinstance(finplan_logger.handlers[0].formatter, JSONFormatter)
        assert finplan_logger.level == logging.WARNING
