"""Structured logging configuration for the Stoic Agent."""

import asyncio
import json
import logging
import logging.config
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_LOG_PATH
from .errors import ConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Chatty at INFO; one line per query or request
QUIET_LOGGERS = ("aiosqlite", "uvicorn.access")


def _current_task_name() -> str | None:
    """Name of the asyncio task emitting the record, if any."""
    try:
        task = asyncio.current_task()
    except RuntimeError:
        # No running event loop in this thread
        return None
    return task.get_name() if task is not None else None


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    The timestamp is the record's creation time, not the time it was
    formatted. Records emitted from inside an asyncio task carry the task
    name, so lines from the timer, the bus handlers and each notification
    delivery can be told apart.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Python 3.12+ records the task name itself
        task_name = getattr(record, "taskName", None) or _current_task_name()
        if task_name:
            log_data["task"] = task_name

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra context if present
        if hasattr(record, "context"):
            log_data["context"] = record.context

        return json.dumps(log_data, default=str)


def resolve_log_level(log_level: str | None) -> str:
    """Normalize a level name, falling back to LOG_LEVEL env var or INFO.

    Raises:
        ConfigurationError: if the name is not a standard logging level.
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL") or "INFO"
    level = log_level.strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(
            f"Unknown log level {log_level!r}; expected one of {', '.join(LOG_LEVELS)}"
        )
    return level


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    console: bool = True,
) -> None:
    """
    Setup structured logging for the agent.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Defaults to LOG_LEVEL env var or INFO.
        log_file: Path to log file. Defaults to ~/.stoic/logs/agent.log.
        console: Also write JSON lines to stdout.

    Raises:
        ConfigurationError: on an unknown log level. Nothing is reconfigured.
    """
    level = resolve_log_level(log_level)

    # Determine log file path
    if log_file is None:
        log_file = str(DEFAULT_LOG_PATH)

    # Create logs directory if it doesn't exist
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handlers = {
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "formatter": "json",
            "encoding": "utf-8",
        },
    }
    if console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        }

    # Third-party noise stays at WARNING unless we are debugging ourselves
    quiet_level = level if level == "DEBUG" else "WARNING"

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "stoic_agent.logging_config.JSONFormatter",
            },
        },
        "handlers": handlers,
        "loggers": {name: {"level": quiet_level} for name in QUIET_LOGGERS},
        "root": {
            "level": level,
            "handlers": list(handlers),
        },
    }

    logging.config.dictConfig(logging_config)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
