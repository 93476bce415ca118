"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

# Log file configuration
LOG_DIR = Path(
    os.environ.get("RELREC_LOG_DIR", Path.home() / ".local" / "state" / "release-reconciler")
)
LOG_FILE = LOG_DIR / "reconciler.log"
MAX_LOG_SIZE = 5 * 1024 * 1024  # 5 MB
BACKUP_COUNT = 3
RETENTION_DAYS = 14

# Marks handlers installed here so repeated configuration replaces them
_HANDLER_TAG = "_release_reconciler_handler"


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _cleanup_old_logs() -> None:
    """Delete rotated log files older than RETENTION_DAYS."""
    if not LOG_DIR.exists():
        return
    cutoff = datetime.now() - timedelta(days=RETENTION_DAYS)
    for log_file in LOG_DIR.glob(f"{LOG_FILE.name}*"):
        try:
            if datetime.fromtimestamp(log_file.stat().st_mtime) < cutoff:
                log_file.unlink()
        except OSError:
            continue


def _file_handler() -> logging.Handler:
    """Build the rotating JSON file handler."""
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    _cleanup_old_logs()

    handler = RotatingFileHandler(LOG_FILE, maxBytes=MAX_LOG_SIZE, backupCount=BACKUP_COUNT)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_shared_processors(),
        )
    )
    return handler


def _console_handler(level: int, json_output: bool, debug: bool) -> logging.Handler:
    """Build the stderr handler.

    Console logs go to stderr so command output on stdout stays parseable.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=debug),
        )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_shared_processors(),
        )
    )
    return handler


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    json_output: bool = False,
    log_file: bool = True,
) -> None:
    """Configure structured logging for the reconciler.

    Console output goes to stderr. When ``log_file`` is set, everything
    down to DEBUG is also written as JSON to LOG_FILE with rotation and
    retention cleanup. Calling this again replaces the handlers from the
    previous call.

    Args:
        verbose: Enable INFO level console output.
        debug: Enable DEBUG level console output.
        json_output: Render console logs as JSON.
        log_file: Also write logs to the rotating file.
    """
    if debug:
        log_level = logging.DEBUG
    elif verbose:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if log_file else log_level
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [h for h in root_logger.handlers if not getattr(h, _HANDLER_TAG, False)]
    root_logger.setLevel(logging.DEBUG)

    handlers = [_console_handler(log_level, json_output, debug)]
    if log_file:
        handlers.append(_file_handler())
    for handler in handlers:
        setattr(handler, _HANDLER_TAG, True)
        root_logger.addHandler(handler)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a logger with optional bound context.

    Args:
        name: Logger name.
        **initial_context: Key/value pairs bound to every event.

    Returns:
        A bound structlog logger.
    """
    logger: structlog.BoundLogger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
