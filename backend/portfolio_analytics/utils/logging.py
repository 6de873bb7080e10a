# backend/portfolio_analytics/utils/logging.py
"""
Logging configuration for the analytics engine.

This module provides centralized logging setup with:
- Environment-based log levels (DEBUG in dev, INFO in prod)
- Structured logging with correlation ID support
- JSON format option for production environments

Usage:
    from portfolio_analytics.utils import setup_logging

    # Once, at process start-up (worker, CLI, web app)
    setup_logging()

Log Levels:
    DEBUG   - Solver iterations, fallbacks, per-point valuation gaps
    INFO    - One line per analytics request
    WARNING - Recoverable issues (missing prices, unavailable benchmark)
    ERROR   - Failures requiring attention

Environment Configuration:
    LOG_LEVEL=DEBUG       # Development - see everything
    LOG_LEVEL=INFO        # Production - requests + problems
    LOG_FORMAT=json       # Production - machine-readable logs
    LOG_FORMAT=text       # Development - human-readable logs (default)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from portfolio_analytics.config import settings
from portfolio_analytics.utils.context import get_correlation_id, get_request_context

# =============================================================================
# CONSTANTS
# =============================================================================

# Default text format: timestamp | level | correlation_id | logger_name | message
DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "no-correlation-id"

# Standard LogRecord attributes never copied into the JSON "extra" block
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
}


# =============================================================================
# CORRELATION ID FILTER
# =============================================================================

class CorrelationIdFilter(logging.Filter):
    """
    Logging filter that adds correlation ID to log records.

    Request context values (e.g. portfolio_id) are copied onto the record
    too, unless the log call already passed them as extra.

    Access in format string: %(correlation_id)s
    """

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        record.correlation_id = correlation_id or NO_CORRELATION_ID
        for key, value in get_request_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


# =============================================================================
# JSON FORMATTER
# =============================================================================

class JsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging in production.

    Output format:
    {
        "timestamp": "2024-01-15T10:30:00.123Z",
        "level": "INFO",
        "logger": "portfolio_analytics.services.analytics.service",
        "correlation_id": "abc-123-def",
        "message": "Computing risk metrics for portfolio demo",
        "extra": { ... }  // Any extra fields passed to logger
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = getattr(record, "correlation_id", NO_CORRELATION_ID)

        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": correlation_id,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {}
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS:
                try:
                    json.dumps(value)
                    extra[key] = value
                except (TypeError, ValueError):
                    extra[key] = str(value)

        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry)


# =============================================================================
# SETUP FUNCTION
# =============================================================================

def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
) -> None:
    """
    Configure process-wide logging with correlation ID support.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to settings.log_level from environment.
        log_format: Output format ('text' or 'json').
                    Defaults to settings.log_format.

    Example:
        setup_logging(level="DEBUG", log_format="text")
    """
    log_level_str = level or settings.log_level
    log_level = _get_log_level(log_level_str)

    format_type = log_format or settings.log_format

    if format_type.lower() == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt=DEFAULT_TEXT_FORMAT,
            datefmt=DEFAULT_DATE_FORMAT,
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured: level={log_level_str}, format={format_type}",
        extra={"config": {"level": log_level_str, "format": format_type}},
    )


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _get_log_level(level_str: str) -> int:
    """
    Convert string log level to logging constant.

    Raises:
        ValueError: If level_str is not a valid log level
    """
    level_str = level_str.upper().strip()

    level_mapping = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    if level_str not in level_mapping:
        valid_levels = ", ".join(level_mapping.keys())
        raise ValueError(
            f"Invalid log level: '{level_str}'. "
            f"Valid levels are: {valid_levels}"
        )

    return level_mapping[level_str]
