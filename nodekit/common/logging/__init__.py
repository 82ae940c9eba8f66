"""Structured logging for nodekit.

Provides JSON logging with correlation IDs, plus a plain text format for
interactive use. Uses python-json-logger for JSON formatting.
"""

import logging
import sys
from typing import Any, TextIO

from pythonjsonlogger.json import JsonFormatter

from nodekit.common.config import get_config

NODE_LOGGER_NAME = "nodekit.node"

LOG_FORMATS = ("json", "plain")


class CorrelationIdFilter(logging.Filter):
    """Logging filter that injects the invocation correlation ID into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject correlation ID into the log record.

        Args:
            record: The log record to modify.

        Returns:
            bool: Always True (doesn't filter out records).
        """
        # Import here to avoid circular dependency
        from nodekit.common.tracing import get_correlation_id

        record.correlation_id = get_correlation_id()
        return True


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter adding timestamp, level, module and correlation_id fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to the JSON log record.

        Args:
            log_record: The dictionary that will be serialized to JSON.
            record: The original logging.LogRecord.
            message_dict: Dictionary from the log message.
        """
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = record.created
        log_record["level"] = record.levelname
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno

        if getattr(record, "correlation_id", None):
            log_record["correlation_id"] = record.correlation_id


def _make_handler(stream: TextIO, fmt: str, level: str) -> logging.Handler:
    if fmt not in LOG_FORMATS:
        raise ValueError(f"unknown log format: {fmt} (expected one of {', '.join(LOG_FORMATS)})")

    handler = logging.StreamHandler(stream)
    handler.setLevel(level.upper())

    formatter: logging.Formatter
    if fmt == "json":
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(module)s %(function)s %(message)s")
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)-5s %(name)s: %(message)s")

    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())
    return handler


def setup_logging(
    level: str | None = None,
    fmt: str | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure root logging for the node process.

    Sets up:
    - JSON (or plain) formatter with correlation IDs
    - A single stream handler (stdout unless ``stream`` is given)
    - Log level from config or parameter

    Args:
        level: Optional log level override (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If not provided, uses LOG_LEVEL from config.
        fmt: Optional format override ("json" or "plain"). Defaults to LOG_FORMAT.
        stream: Stream to write records to.

    Returns:
        logging.Logger: The node logger, ready to use.

    Raises:
        ValueError: If the level or format is not recognised.
    """
    config = get_config()
    log_level = (level or config.log_level).upper()
    log_format = (fmt or config.log_format).lower()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()
    root_logger.addHandler(_make_handler(stream or sys.stdout, log_format, log_level))

    # Take over a node logger previously detached by new_logger.
    node_logger = logging.getLogger(NODE_LOGGER_NAME)
    node_logger.handlers.clear()
    node_logger.setLevel(logging.NOTSET)
    node_logger.propagate = True
    return node_logger


def new_logger(stream: TextIO, name: str = NODE_LOGGER_NAME) -> logging.Logger:
    """Create a standalone logger writing JSON records to ``stream``.

    Unlike :func:`setup_logging` this leaves the root logger untouched; the
    returned logger does not propagate.
    """
    config = get_config()
    logger = logging.getLogger(name)
    logger.setLevel(config.log_level)
    logger.handlers.clear()
    logger.addHandler(_make_handler(stream, config.log_format, config.log_level))
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given module.

    Args:
        name: The logger name (typically __name__ from the calling module).

    Returns:
        logging.Logger: Configured logger instance.
    """
    return logging.getLogger(name)


__all__ = [
    "CorrelationIdFilter",
    "CustomJsonFormatter",
    "LOG_FORMATS",
    "NODE_LOGGER_NAME",
    "get_logger",
    "new_logger",
    "setup_logging",
]
