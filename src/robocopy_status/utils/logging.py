"""Logging infrastructure with operation ID tracking and structured output.

Every robocopy invocation runs inside an operation context; the operation ID
is stored in a ContextVar and attached to each log record, so the records of
one copy can be told apart from another's even when tasks interleave.
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.handlers
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Final, override

operation_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation_id",
    default=None,
)

DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - [%(operation_id)s] - %(message)s"

# Rotating file handler limits
LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUP_COUNT: Final[int] = 3

# LogRecord attributes that are not structured context
_STANDARD_ATTRS: Final[frozenset[str]] = frozenset(
    {
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
        "module", "lineno", "funcName", "created", "msecs", "relativeCreated",
        "thread", "threadName", "processName", "process", "taskName",
        "exc_info", "exc_text", "stack_info", "message", "asctime",
    }
)


class OperationIDFilter(logging.Filter):
    """Logging filter that adds the current operation ID to log records."""

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        """Add operation ID to the record from the ContextVar.

        Args:
            record: Log record to enhance

        Returns:
            True to allow the record to be logged
        """
        operation_id = operation_id_var.get()
        record.operation_id = operation_id if operation_id is not None else "N/A"
        return True


class StructuredFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects, including extra fields."""

    @override
    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format

        Returns:
            JSON formatted string
        """
        log_data: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]  # heterogeneous log payload
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName or "<module>",
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():  # pyright: ignore[reportAny]  # dynamic record attributes
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                log_data[key] = value

        # Non-serializable context (paths, enums) falls back to str()
        return json.dumps(log_data, ensure_ascii=False, separators=(",", ":"), default=str)


def configure_logging(
    *,
    log_level: str = "INFO",
    log_format: str = "text",
    log_file: Path | None = None,
    enable_console: bool = True,
) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: ``text`` for human-readable lines, ``json`` for structured output
        log_file: Optional path of a rotating log file
        enable_console: Enable the stderr console handler

    Example:
        >>> configure_logging(log_level="DEBUG", log_format="json")
        >>> logging.getLogger(__name__).info("Copy started", extra={"source": "C:\\\\data"})
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter: logging.Formatter = (
        StructuredFormatter() if log_format == "json" else logging.Formatter(DEFAULT_LOG_FORMAT)
    )
    operation_filter = OperationIDFilter()

    handlers: list[logging.Handler] = []
    if enable_console:
        handlers.append(logging.StreamHandler(sys.stderr))

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUP_COUNT,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(operation_filter)
        root_logger.addHandler(handler)


def get_operation_id() -> str | None:
    """Get the operation ID of the current context, if any."""
    return operation_id_var.get()


@contextmanager
def operation_context(operation_id: str | None = None) -> Iterator[str]:
    """Run a block with an operation ID attached to all log records.

    Args:
        operation_id: Identifier to use; a UUID4 is generated if omitted

    Yields:
        The active operation ID
    """
    active_id = operation_id or str(uuid.uuid4())
    token = operation_id_var.set(active_id)
    try:
        yield active_id
    finally:
        operation_id_var.reset(token)
