"""
Structured logging configuration for secretlink.

Provides consistent logging across all modules with a human-readable
format for terminal use and a JSON format for log aggregation. Logs
always go to stderr by default so stdout stays free for JSON output.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("human", "json")

_RESERVED_ATTRS = frozenset(
    (
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    )
)


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs structured JSON logs, one object per line.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        include_location: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ):
        """
        Initialize structured formatter.

        Args:
            include_timestamp: Include timestamp in output
            include_level: Include log level in output
            include_logger: Include logger name in output
            include_location: Include file/line location
            extra_fields: Additional fields to include in every log
        """
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.include_location = include_location
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {}

        if self.include_timestamp:
            log_data["timestamp"] = (
                datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
            )

        if self.include_level:
            log_data["level"] = record.levelname.lower()

        if self.include_logger:
            log_data["logger"] = record.name

        log_data["message"] = record.getMessage()

        if self.include_location:
            log_data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extra fields passed through SecretLinkLogger
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        log_data.update(self.extra_fields)

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Formatter that outputs human-readable logs for CLI usage.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(
        self,
        use_colors: bool = True,
        include_timestamp: bool = False,
        include_level: bool = True,
    ):
        """
        Initialize human-readable formatter.

        Args:
            use_colors: Use ANSI colors in output
            include_timestamp: Include timestamp in output
            include_level: Include log level in output
        """
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()
        self.include_timestamp = include_timestamp
        self.include_level = include_level

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as human-readable text."""
        parts = []

        if self.include_timestamp:
            timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
            parts.append(f"[{timestamp}]")

        if self.include_level:
            level = record.levelname
            if self.use_colors and level in self.COLORS:
                level = f"{self.COLORS[level]}{level}{self.RESET}"
            parts.append(f"{level:>8}")

        parts.append(f"{record.name}:")
        parts.append(record.getMessage())

        output = " ".join(parts)

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)

        return output


class SecretLinkLogger:
    """
    Wrapper around Python logging for secretlink.

    Provides named events for the pipeline stages.
    """

    def __init__(self, name: str, level: int = logging.NOTSET):
        """
        Initialize logger.

        Args:
            name: Logger name
            level: Log level (NOTSET defers to the "secretlink" logger)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

    def _log(
        self,
        level: int,
        message: str,
        exc_info: bool = False,
        **kwargs: Any,
    ) -> None:
        self.logger.log(level, message, exc_info=exc_info, extra=kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def extraction_completed(
        self,
        source: str,
        record_count: int,
        skipped_count: int = 0,
        warning_count: int = 0,
    ) -> None:
        """Log the end of detector or rule extraction."""
        self.info(
            f"{source}: extracted {record_count} records",
            event_type="extraction.completed",
            source=source,
            record_count=record_count,
            skipped_count=skipped_count,
            warning_count=warning_count,
        )

    def join_completed(
        self,
        total_services: int,
        services_with_hosts: int,
        host_only_services: int,
    ) -> None:
        """Log the end of the keyword join."""
        self.debug(
            "Join completed",
            event_type="join.completed",
            total_services=total_services,
            services_with_hosts=services_with_hosts,
            host_only_services=host_only_services,
        )

    def export_written(self, path: str, bytes_written: int) -> None:
        """Log a durable write."""
        self.info(
            f"Wrote {path}",
            event_type="export.written",
            path=path,
            bytes_written=bytes_written,
        )


def configure_logging(
    level: str = "INFO",
    format: str = "human",
    output: str = "stderr",
    extra_fields: dict[str, Any] | None = None,
) -> None:
    """
    Configure logging for secretlink.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format (human, json)
        output: Output destination (stderr, stdout)
        extra_fields: Extra fields to include in structured logs

    Raises:
        ValueError: If the level or format is not recognized
    """
    if level.upper() not in LOG_LEVELS:
        raise ValueError(f"invalid log level {level!r}: must be one of {', '.join(LOG_LEVELS)}")
    if format not in LOG_FORMATS:
        raise ValueError(f"invalid log format {format!r}: must be one of {', '.join(LOG_FORMATS)}")

    root_logger = logging.getLogger("secretlink")
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    if output == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    else:
        handler = logging.StreamHandler(sys.stderr)

    if format == "json":
        formatter: logging.Formatter = StructuredFormatter(extra_fields=extra_fields)
    else:
        formatter = HumanReadableFormatter()

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str) -> SecretLinkLogger:
    """
    Get a secretlink logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        SecretLinkLogger instance
    """
    return SecretLinkLogger(f"secretlink.{name}")


# Configure logging from environment on import, ignoring unknown values
_log_level = os.getenv("SECRETLINK_LOG_LEVEL", "INFO")
if _log_level.upper() not in LOG_LEVELS:
    _log_level = "INFO"
_log_format = os.getenv("SECRETLINK_LOG_FORMAT", "human")
if _log_format not in LOG_FORMATS:
    _log_format = "human"
configure_logging(level=_log_level, format=_log_format)
