"""Logging configuration for the Freshsales client.

Uses Python's standard logging module. Records can be rendered as plain
text, text with request context, or JSON for log aggregation.
"""

import json
import logging
import logging.config
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, Optional

from freshsales_api.core.config import settings


# Attributes present on every LogRecord; anything else came in through extra=
_RECORD_ATTRS = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "message",
    "asctime", "taskName",
))


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Attributes:
        fields: Context fields copied to the top level of the JSON object
    """

    # Contextual fields for request tracking
    CONTEXT_FIELDS = [
        "method",        # HTTP method
        "uri",           # Full request URI
        "status_code",   # HTTP response status
        "family",        # Quota family (e.g. "rest")
        "duration_ms",   # Request round trip in milliseconds
    ]

    def __init__(
        self,
        fields: Optional[list] = None,
        datefmt: Optional[str] = None,
    ):
        super().__init__(datefmt=datefmt)
        self.fields = fields or self.CONTEXT_FIELDS

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string representation of the log record
        """
        record.message = record.getMessage()

        log_data: Dict[str, Any] = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.message,
            "source": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        for field in self.fields:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key in self.CONTEXT_FIELDS:
                continue
            log_data.setdefault("extra", {})[key] = value

        if record.exc_info and record.exc_info != (None, None, None):
            log_data["exception"] = traceback.format_exception(*record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class ContextFilter(logging.Filter):
    """Logging filter that adds default request context fields to records."""

    CONTEXT_DEFAULTS = {
        "method": None,
        "uri": None,
        "status_code": None,
        "family": None,
        "duration_ms": None,
    }

    def filter(self, record: logging.LogRecord) -> bool:
        for field, default in self.CONTEXT_DEFAULTS.items():
            if not hasattr(record, field):
                setattr(record, field, default)
        return True


def get_logging_config() -> Dict[str, Any]:
    """Get logging configuration dictionary.

    Returns:
        Logging configuration dict compatible with logging.config.dictConfig
    """
    log_format = settings.log_format.lower()
    log_level = settings.log_level.upper()

    formatters = {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        },
        "structured": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s - method=%(method)s - uri=%(uri)s - status_code=%(status_code)s - duration_ms=%(duration_ms)s"
        },
    }

    if log_format == "json":
        formatters["json"] = {
            "()": "freshsales_api.core.logging.JSONFormatter",
        }
        default_formatter = "json"
    else:
        default_formatter = "structured" if log_format == "structured" else "standard"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": {
            "context": {
                "()": "freshsales_api.core.logging.ContextFilter",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": default_formatter,
                "stream": sys.stdout,
                "filters": ["context"],
            },
        },
        "loggers": {
            "freshsales_api": {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False,
            },
            "httpx": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging() -> None:
    """Configure logging for the client package."""
    logging.config.dictConfig(get_logging_config())


def get_logger(name: str = "freshsales_api") -> logging.Logger:
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)


def get_log_context(
    method: Optional[str] = None,
    uri: Optional[str] = None,
    status_code: Optional[int] = None,
    family: Optional[str] = None,
    **extra
) -> Dict[str, Any]:
    """Create a log context dictionary for use with the extra parameter.

    Example:
        >>> logger.debug(
        ...     "Request sent",
        ...     extra=get_log_context(method="GET", uri="https://x/api/leads"),
        ... )
    """
    context = {
        "method": method,
        "uri": uri,
        "status_code": status_code,
        "family": family,
    }
    context.update(extra)
    return {k: v for k, v in context.items() if v is not None}
