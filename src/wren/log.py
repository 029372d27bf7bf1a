"""Logging setup for wren applications.

Every wren module logs through a named child of the ``wren`` logger
(``wren.app``, ``wren.routes``, ``wren.server``, ``wren.request``).
``configure_logging()`` attaches handlers to ``wren`` once, from an
``AppConfig``::

    configure_logging(AppConfig(log_format="json", log_level="debug"))

Structured data passed through ``extra=`` (route discovery records,
request summaries) is kept as JSON fields by ``JSONFormatter``.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from wren.config import AppConfig
from wren.context import get_correlation_id

ROOT_LOGGER = "wren"

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s%(correlation)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord has; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "correlation_id", "correlation"}

# Marks handlers installed by configure_logging so a second call replaces them
_WREN_HANDLER = "_wren_handler"


class CorrelationIdFilter(logging.Filter):
    """Attach the current request's correlation id to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        record.correlation_id = correlation_id
        record.correlation = f" [{correlation_id}]" if correlation_id else ""
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Fields: ``timestamp``, ``level``, ``logger``, ``message``, the
    correlation id when set, every ``extra`` attribute, and the
    formatted traceback under ``exception``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            payload["requestId"] = correlation_id
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _formatter(config: AppConfig) -> logging.Formatter:
    if config.log_format == "json":
        return JSONFormatter()
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT)


def configure_logging(config: AppConfig) -> logging.Logger:
    """Attach handlers to the ``wren`` logger according to *config*.

    Logs go to stderr, and additionally to ``config.log_file`` when set.
    Calling this again replaces the handlers installed the previous time.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(config.log_level.upper())

    for handler in list(logger.handlers):
        if getattr(handler, _WREN_HANDLER, False):
            logger.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, encoding="utf-8"))

    formatter = _formatter(config)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(CorrelationIdFilter())
        setattr(handler, _WREN_HANDLER, True)
        logger.addHandler(handler)

    return logger
