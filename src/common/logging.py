"""
Structured logging configuration for the pair signal engine.

This module provides JSON-structured logging with container-friendly output,
an optional plain text format, and helpers for signal-specific events.
"""

import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Optional
from contextlib import contextmanager

from .config import get_settings


_RESERVED_RECORD_FIELDS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'message', 'exc_info',
    'exc_text', 'stack_info', 'getMessage', 'taskName'
}

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def __init__(self, service_name: str = "unknown"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        # Base log entry
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": self.service_name,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        # Add exception information if present
        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        # Add extra fields if present
        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_FIELDS
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, default=str, separators=(',', ':'))


def setup_logging(
    service_name: str,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> logging.Logger:
    """
    Set up structured logging for a service.

    The handler is attached to the root logger so module-level loggers
    (``logging.getLogger(__name__)``) in the library packages share it.

    Args:
        service_name: Name of the service
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" or "text"

    Returns:
        Configured logger instance
    """
    settings = get_settings()

    if log_level is None:
        log_level = settings.logging.level
    if log_format is None:
        log_format = settings.logging.format
    level = getattr(logging, log_level.upper())

    root = logging.getLogger()
    root.setLevel(level)

    # Clear existing handlers
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if log_format.lower() == "text":
        console_handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        console_handler.setFormatter(JSONFormatter(service_name))
    root.addHandler(console_handler)

    logger = logging.getLogger(service_name)
    logger.info(f"Logging initialized for service: {service_name}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the current service configuration.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


@contextmanager
def log_execution_time(logger: logging.Logger, operation: str, level: int = logging.INFO):
    """
    Context manager to log execution time of operations.

    Args:
        logger: Logger instance
        operation: Description of the operation
        level: Log level
    """
    start_time = time.time()
    try:
        yield
        execution_time = (time.time() - start_time) * 1000  # Convert to milliseconds
        logger.log(level, f"{operation} completed", extra={
            "operation": operation,
            "execution_time_ms": round(execution_time, 2)
        })
    except Exception as e:
        execution_time = (time.time() - start_time) * 1000
        logger.error(f"{operation} failed", extra={
            "operation": operation,
            "execution_time_ms": round(execution_time, 2),
            "error": str(e)
        })
        raise


def log_signal_event(
    logger: logging.Logger,
    event_type: str,
    pair: str,
    **kwargs
):
    """
    Log signal-specific events with structured data.

    Args:
        logger: Logger instance
        event_type: Type of signal event (entry, exit, regime_change, cost_veto, etc.)
        pair: Pair key, e.g. "AAA/BBB"
        **kwargs: Additional event data
    """
    logger.info(f"Signal event: {event_type}", extra={
        "event_type": event_type,
        "pair": pair,
        "signal_data": kwargs
    })


def log_system_event(
    logger: logging.Logger,
    event_type: str,
    **kwargs
):
    """
    Log system events with structured data.

    Args:
        logger: Logger instance
        event_type: Type of system event (startup, shutdown, run_complete, etc.)
        **kwargs: Additional event data
    """
    logger.info(f"System event: {event_type}", extra={
        "event_type": event_type,
        "system_data": kwargs
    })
