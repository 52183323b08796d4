"""
Shared Logger

Centralized logging configuration. Structured context travels on each record
as ``extra_data``; the JSON formatter lifts the scheduling identifiers
(tenant, booking, waitlist entry) to top-level keys so log search can filter
on them directly.
"""

import copy
import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

LOG_LINE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PROMOTED_FIELDS = ("tenant_id", "booking_id", "entry_id", "correlation_id")


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            extra = dict(extra_data)
            for key in PROMOTED_FIELDS:
                if extra.get(key) is not None:
                    log_data[key] = extra.pop(key)
            if extra:
                log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored console log formatter."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format with colors."""
        # Work on a copy so other handlers see the plain level name
        colored = copy.copy(record)
        color = self.COLORS.get(record.levelname, self.RESET)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


class ContextLogger:
    """Logger that attaches a structured context to every record."""

    def __init__(self, name: str, context: dict[str, Any] | None = None):
        """
        Initialize context logger.

        Args:
            name: Logger name
            context: Default context to include in all logs
        """
        self._logger = logging.getLogger(name)
        self._context = context or {}

    @property
    def name(self) -> str:
        return self._logger.name

    def with_context(self, **kwargs) -> "ContextLogger":
        """Create new logger with additional context."""
        return ContextLogger(self._logger.name, {**self._context, **kwargs})

    def for_tenant(self, tenant_id: str) -> "ContextLogger":
        return self.with_context(tenant_id=tenant_id)

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs) -> None:
        extra = {**self._context, **kwargs}
        self._logger.log(level, message, exc_info=exc_info, extra={"extra_data": extra})

    def debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Log exception with traceback."""
        self._log(logging.ERROR, message, exc_info=True, **kwargs)


def configure_logging(
    level: str = "INFO",
    format_type: str = "colored",
    log_file: str | None = None,
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: 'colored', 'json', or 'plain'
        log_file: Optional file path for file logging
    """
    numeric_level = getattr(logging, level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)

    if format_type == "json":
        console_handler.setFormatter(JSONFormatter())
    elif format_type == "colored":
        console_handler.setFormatter(ColoredFormatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))

    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # APScheduler logs every job execution at INFO
    logging.getLogger("apscheduler").setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str, context: dict[str, Any] | None = None) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (typically __name__)
        context: Default context

    Returns:
        ContextLogger instance
    """
    return ContextLogger(name, context)


def get_service_logger(service_name: str) -> ContextLogger:
    """Get logger for application services."""
    return get_logger(f"bookwise.service.{service_name}", {"component": "service", "service": service_name})


def get_audit_logger() -> ContextLogger:
    """Get logger for audit lines (bulk changes and other unlogged-in-row mutations)."""
    return get_logger("bookwise.audit", {"component": "audit"})


def get_scheduler_logger(job_name: str) -> ContextLogger:
    """Get logger for periodic sweep jobs."""
    return get_logger(f"bookwise.scheduler.{job_name}", {"component": "scheduler", "job": job_name})
