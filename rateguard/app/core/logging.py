"""Structured logging configuration for rateguard.

This module provides a logging setup using Python's standard logging
module, with JSON formatting available for production environments.
"""

import json
import logging
import logging.config
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, Optional

from rateguard.app.core.config import settings


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Outputs log records as JSON objects for consumption by log aggregation
    systems like ELK Stack or Grafana Loki. Verdict context fields are
    emitted at the top level; any other extra= values go under "extra".
    """

    # Contextual fields for request tracking
    CONTEXT_FIELDS = [
        "client_ip",     # Resolved origin address
        "status",        # Verification status (SAFE, LIMITED, BANNED)
        "http_code",     # Code attached to the verdict
        "path",          # Request path
        "method",        # HTTP method
    ]

    # LogRecord attributes that never go into the "extra" section
    RESERVED_ATTRS = frozenset((
        "name", "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "exc_info", "exc_text", "stack_info",
        "lineno", "funcName", "created", "msecs", "relativeCreated",
        "thread", "threadName", "processName", "process", "message",
        "asctime", "timestamp", "logger", "level", "source", "taskName",
    ))

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string representation of the log record
        """
        log_data: Dict[str, Any] = {}

        record.message = record.getMessage()

        log_data["timestamp"] = datetime.fromtimestamp(record.created).astimezone().isoformat()
        log_data["level"] = record.levelname
        log_data["logger"] = record.name
        log_data["message"] = record.message

        log_data["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        for field in self.CONTEXT_FIELDS:
            if hasattr(record, field):
                value = getattr(record, field)
                if value is not None and value != "-":
                    log_data[field] = value

        for key, value in record.__dict__.items():
            if key in self.RESERVED_ATTRS or key in self.CONTEXT_FIELDS:
                continue
            log_data.setdefault("extra", {})[key] = value

        if record.exc_info and record.exc_info != (None, None, None):
            log_data["exception"] = traceback.format_exception(*record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class ContextFilter(logging.Filter):
    """Logging filter that adds contextual fields to log records.

    Adds default values for client_ip, status and the other contextual
    fields if not already present in the log record.
    """

    CONTEXT_DEFAULTS = {
        "client_ip": None,
        "status": None,
        "http_code": None,
        "path": None,
        "method": None,
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
    log_format = getattr(settings, "log_format", "text").lower()
    log_level = getattr(settings, "log_level", "INFO").upper()

    formatters = {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        },
        "structured": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s - client_ip=%(client_ip)s - status=%(status)s - http_code=%(http_code)s"
        },
    }

    if log_format == "json":
        formatters["json"] = {
            "()": "rateguard.app.core.logging.JSONFormatter",
        }
        default_formatter = "json"
    else:
        default_formatter = "structured" if log_format == "structured" else "standard"

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": default_formatter,
            "stream": sys.stdout,
            "filters": ["context"],
        },
        "error_console": {
            "class": "logging.StreamHandler",
            "level": "ERROR",
            "formatter": default_formatter,
            "stream": sys.stderr,
            "filters": ["context"],
        },
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": {
            "context": {
                "()": "rateguard.app.core.logging.ContextFilter",
            },
        },
        "handlers": handlers,
        "loggers": {
            "rateguard": {
                "level": log_level,
                "handlers": ["console", "error_console"],
                "propagate": False,
            },
            "uvicorn": {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
        "root": {
            "level": log_level,
            "handlers": ["console"],
        },
    }


def setup_logging() -> None:
    """Configure logging for the application."""
    logging.config.dictConfig(get_logging_config())

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str = "rateguard") -> logging.Logger:
    """Get a logger instance with the specified name.

    Args:
        name: Logger name, defaults to "rateguard"

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def get_log_context(
    client_ip: Optional[str] = None,
    status: Optional[str] = None,
    http_code: Optional[int] = None,
    **extra
) -> Dict[str, Any]:
    """Create a log context dictionary for use with extra parameter.

    Args:
        client_ip: Resolved origin address
        status: Verification status name
        http_code: Code attached to the verdict
        **extra: Additional custom fields

    Returns:
        Dictionary suitable for passing as extra= parameter to logging calls

    Example:
        >>> logger.warning(
        ...     "Address promoted to block list",
        ...     extra=get_log_context(client_ip="10.0.0.1", status="BANNED")
        ... )
    """
    context = {
        "client_ip": client_ip,
        "status": status,
        "http_code": http_code,
    }
    context.update(extra)
    return {k: v for k, v in context.items() if v is not None}
