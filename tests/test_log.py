"""Tests for wren.log — handler setup and JSON output."""

import json
import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from wren.config import AppConfig
from wren.context import correlation_id_var
from wren.log import ROOT_LOGGER, CorrelationIdFilter, JSONFormatter, configure_logging


@pytest.fixture
def wren_logger() -> Iterator[logging.Logger]:
    """Restore the ``wren`` logger after a test reconfigures it."""
    logger = logging.getLogger(ROOT_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


def _record(msg: str = "hello", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("wren.routes", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self) -> None:
        payload = json.loads(JSONFormatter().format(_record()))

        assert payload["level"] == "info"
        assert payload["logger"] == "wren.routes"
        assert payload["message"] == "hello"
        assert "timestamp" in payload
        assert "requestId" not in payload

    def test_extra_fields_kept(self) -> None:
        record = _record(route_discovery={"path": "v1/users.py", "outcome": "success"})

        payload = json.loads(JSONFormatter().format(record))

        assert payload["route_discovery"] == {"path": "v1/users.py", "outcome": "success"}

    def test_correlation_id(self) -> None:
        record = _record()
        token = correlation_id_var.set("req-9")
        try:
            CorrelationIdFilter().filter(record)
        finally:
            correlation_id_var.reset(token)

        payload = json.loads(JSONFormatter().format(record))

        assert payload["requestId"] == "req-9"
        assert "correlation" not in payload

    def test_exception(self) -> None:
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord(
                "wren.server", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        payload = json.loads(JSONFormatter().format(record))

        assert "ValueError: bad" in payload["exception"]


class TestCorrelationIdFilter:
    def test_without_request(self) -> None:
        record = _record()
        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id is None
        assert record.correlation == ""


class TestConfigureLogging:
    def test_sets_level_and_handler(self, wren_logger: logging.Logger) -> None:
        configure_logging(AppConfig(log_level="debug"))

        assert wren_logger.level == logging.DEBUG
        installed = [h for h in wren_logger.handlers if getattr(h, "_wren_handler", False)]
        assert len(installed) == 1
        assert not isinstance(installed[0].formatter, JSONFormatter)

    def test_reconfigure_replaces_handlers(self, wren_logger: logging.Logger) -> None:
        configure_logging(AppConfig())
        configure_logging(AppConfig(log_format="json"))

        installed = [h for h in wren_logger.handlers if getattr(h, "_wren_handler", False)]
        assert len(installed) == 1
        assert isinstance(installed[0].formatter, JSONFormatter)

    def test_log_file(self, wren_logger: logging.Logger, tmp_path: Path) -> None:
        log_file = tmp_path / "app.log"
        configure_logging(AppConfig(log_file=str(log_file), log_format="json"))

        logging.getLogger("wren.app").info("written", extra={"startup": {"port": 3000}})
        for handler in wren_logger.handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["message"] == "written"
        assert payload["startup"] == {"port": 3000}
