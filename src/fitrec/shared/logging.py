"""
Structured logging for fitrec.

Helpers that record operation start/success/failure, upstream API calls and
per-category pipeline state transitions with structured context attached.
Nothing here configures a logger at import time; the CLI calls
``setup_structured_logger`` once at startup.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from fitrec.shared.errors import ErrorContext, FitrecError

_EXTRA_FIELDS = (
    "error_code",
    "context",
    "operation",
    "duration_ms",
    "result_info",
    "category",
    "from_state",
    "to_state",
)


class StructuredFormatter(logging.Formatter):
    """Formatter that renders each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created,
                tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def _create_rich_console() -> Console:
    custom_theme = Theme(
        {
            "logging.level.debug": "cyan",
            "logging.level.info": "green",
            "logging.level.warning": "yellow",
            "logging.level.error": "red bold",
            "logging.level.critical": "red bold reverse",
            "log.time": "dim cyan",
            "log.message": "white",
            "log.path": "dim blue",
        }
    )
    return Console(theme=custom_theme, stderr=True)


def setup_structured_logger(
    name: str = "fitrec",
    level: str = "INFO",
    log_file: str | None = None,
    *,
    use_rich_console: bool = True,
) -> logging.Logger:
    """
    Configure the named logger for structured output.

    Args:
        name: Logger name (default: "fitrec")
        level: Log level name (default: "INFO")
        log_file: Optional path of a JSON lines log file
        use_rich_console: Use a Rich console handler instead of JSON on stderr

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)

    # Replace handlers from an earlier call
    if logger.handlers:
        logger.handlers.clear()

    log_level = getattr(logging, level.upper())
    logger.setLevel(log_level)

    if use_rich_console:
        handler: logging.Handler = RichHandler(
            console=_create_rich_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            log_time_format="[%H:%M:%S]",
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(StructuredFormatter())
    handler.setLevel(log_level)
    logger.addHandler(handler)

    # File output is always JSON
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def _context_to_dict(
    context: (dict[str, Any] | ErrorContext) | None,
) -> dict[str, Any]:
    if context is None:
        return {}
    if isinstance(context, ErrorContext):
        return context.safe_dict()
    return dict(context)


def log_operation_error(
    logger: logging.Logger,
    error: FitrecError,
    operation: str | None = None,
    context: (dict[str, Any] | ErrorContext) | None = None,
    additional_context: (dict[str, Any] | ErrorContext) | None = None,
) -> None:
    """
    Record a FitrecError with its masked context.

    Args:
        logger: Logger instance
        error: Error to record
        operation: Operation name, defaults to the error context's operation
        context: Extra context merged over the error's own
        additional_context: Further context merged last
    """
    context_dict: dict[str, Any] = {}
    if error.context:
        context_dict.update(error.context.safe_dict())
    context_dict.update(_context_to_dict(context))
    context_dict.update(_context_to_dict(additional_context))

    logger.error(
        error.message,
        extra={
            "error_code": error.code.name,
            "context": context_dict,
            "operation": operation or error.context.operation,
        },
        exc_info=error.original_error is not None,
    )


def log_operation_success(
    logger: logging.Logger,
    operation: str,
    duration_ms: float,
    result_info: dict[str, Any] | None = None,
    context: (dict[str, Any] | ErrorContext) | None = None,
) -> None:
    """
    Record the successful completion of an operation at DEBUG level.

    Args:
        logger: Logger instance
        operation: Operation name
        duration_ms: Elapsed time in milliseconds
        result_info: Summary of the result
        context: Context information
    """
    logger.debug(
        "Operation '%s' completed successfully",
        operation,
        extra={
            "operation": operation,
            "duration_ms": duration_ms,
            "result_info": result_info or {},
            "context": _context_to_dict(context),
        },
    )


def log_operation_start(
    logger: logging.Logger,
    operation: str,
    context: dict[str, Any] | None = None,
) -> None:
    logger.debug(
        "Starting operation '%s'",
        operation,
        extra={
            "operation": operation,
            "context": context or {},
        },
    )


def log_api_call(
    logger: logging.Logger,
    endpoint: str,
    method: str = "GET",
    status_code: int | None = None,
    duration_ms: float | None = None,
    context: dict[str, Any] | None = None,
) -> None:
    """
    Record a call to an upstream API.

    Calls that came back with a 4xx/5xx status are logged at WARNING,
    everything else at DEBUG.

    Args:
        logger: Logger instance
        endpoint: Endpoint path or URL
        method: HTTP method (default: "GET")
        status_code: HTTP status code, if a response arrived
        duration_ms: Elapsed time in milliseconds
        context: Context information
    """
    api_context: dict[str, Any] = {
        "endpoint": endpoint,
        "method": method,
    }
    if status_code is not None:
        api_context["status_code"] = status_code
    if duration_ms is not None:
        api_context["duration_ms"] = duration_ms
    if context:
        api_context.update(context)

    level = logging.DEBUG
    message = f"API call to {endpoint}"
    if status_code is not None:
        if status_code >= 400:
            level = logging.WARNING
            message += f" failed with status {status_code}"
        else:
            message += f" succeeded with status {status_code}"

    logger.log(
        level,
        message,
        extra={
            "operation": "api_call",
            "context": api_context,
        },
    )


def log_state_transition(
    logger: logging.Logger,
    category: str,
    from_state: str,
    to_state: str,
    context: dict[str, Any] | None = None,
) -> None:
    """Record a per-category pipeline state change."""
    logger.debug(
        "Category '%s': %s -> %s",
        category,
        from_state,
        to_state,
        extra={
            "operation": "pipeline_state",
            "category": category,
            "from_state": from_state,
            "to_state": to_state,
            "context": context or {},
        },
    )
