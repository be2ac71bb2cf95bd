"""
Tests for logging configuration.
"""

import json
import logging

import pytest

from exhibitnet.common.logging_config import (
    setup_logging,
    get_logger,
    log_performance_metric,
    LoggingTimer,
    JSONFormatter,
    ROOT_LOGGER_NAME,
    ENV_LOG_LEVEL,
    ENV_LOG_FILE,
    ENV_LOG_DIR,
    ENV_LOG_CONSOLE,
    ENV_LOG_JSON,
)


@pytest.fixture(autouse=True)
def reset_root_logger(monkeypatch):
    for name in [ENV_LOG_LEVEL, ENV_LOG_FILE, ENV_LOG_DIR, ENV_LOG_CONSOLE, ENV_LOG_JSON]:
        monkeypatch.delenv(name, raising=False)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


class TestSetupLogging:
    """Test the main setup_logging function."""

    def test_basic_setup(self):
        logger = setup_logging(force_setup=True)

        assert logger.name == "exhibitnet"
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)
        assert not logger.propagate

    def test_custom_level(self):
        logger = setup_logging(level="DEBUG", force_setup=True)
        assert logger.level == logging.DEBUG

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            setup_logging(level="LOUD", force_setup=True)

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv(ENV_LOG_LEVEL, "WARNING")
        logger = setup_logging(force_setup=True)
        assert logger.level == logging.WARNING

    def test_log_dir_creates_file(self, tmp_path):
        logger = setup_logging(log_dir=str(tmp_path / "logs"), console=False, force_setup=True)
        get_logger("exhibitnet.tests").info("hello")

        for handler in logger.handlers:
            handler.flush()

        log_file = tmp_path / "logs" / "exhibitnet.log"
        assert log_file.exists()
        assert "hello" in log_file.read_text(encoding="utf-8")

    def test_second_call_keeps_handlers(self):
        first = setup_logging(force_setup=True)
        handlers = list(first.handlers)

        assert setup_logging(level="DEBUG").handlers == handlers


class TestJSONFormatter:
    """Test JSON log lines."""

    def test_format_includes_extra_fields(self):
        record = logging.LogRecord(
            "exhibitnet.network", logging.INFO, __file__, 10, "built %d nodes", (4,), None
        )
        record.decade = 1930

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "built 4 nodes"
        assert payload["level"] == "INFO"
        assert payload["decade"] == 1930


class TestPerformanceLogging:
    """Test timing helpers."""

    def test_log_performance_metric(self, caplog):
        with caplog.at_level(logging.INFO, logger="exhibitnet.performance"):
            log_performance_metric("segment_by_decade", 0.25, {"decades": 3})

        assert "segment_by_decade completed in 0.250s" in caplog.text
        assert "decades=3" in caplog.text

    def test_logging_timer(self, caplog):
        with caplog.at_level(logging.INFO, logger="exhibitnet.performance"):
            with LoggingTimer("normalize_metrics"):
                pass

        assert "normalize_metrics completed" in caplog.text
