"""
observability/logger.py — runq Structured Logger

Sets up structlog with:
  - Human-readable output to console (dev mode) or JSON (prod mode)
  - Optional JSON output to a rotating log file
  - Consistent fields on every log line: timestamp, level, event, logger

The queue itself never talks to a logger object directly. It receives a
DiagnosticLog — a callable ``log(level, event, **fields)`` — which is either
``portable_log(...)`` (structlog-backed) or ``null_log`` (drops everything).

Usage:
    from runq.observability.logger import setup_logging, portable_log

    setup_logging(level="DEBUG", json_format=False)   # call once at startup
    setup_logging_from_settings(get_settings())        # or from RunQSettings.logging
    queue = RunQ(concurrency=3, log=portable_log("runq"))
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import structlog

DiagnosticLog = Callable[..., None]


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────


def setup_logging(
    level: str = "INFO",
    log_dir: str | Path | None = None,
    json_format: bool = True,
    console_output: bool = True,
    max_bytes: int = 100 * 1024 * 1024,   # 100 MB
    backup_count: int = 5,
) -> None:
    """
    Configure structlog and stdlib logging. Call once at application startup.

    Args:
        level:          Log level string — DEBUG | INFO | WARNING | ERROR | CRITICAL
        log_dir:        Directory for rotating log files. None disables the file handler.
        json_format:    If True, console emits JSON (production mode).
                        If False, console uses coloured human-readable format (dev mode).
        console_output: Whether to emit logs to stderr at all.
        max_bytes:      Max size of each log file before rotation.
        backup_count:   Number of rotated log files to keep.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    # ── Shared structlog processors ───────────────────────────────────────────
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    handlers: list[logging.Handler] = []

    # ── File handler (always JSON) ────────────────────────────────────────────
    file_handler: Optional[logging.Handler] = None
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / "runq.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        handlers.append(file_handler)

    # ── Console handler (JSON or pretty) ─────────────────────────────────────
    console_handler: Optional[logging.Handler] = None
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        handlers.append(console_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    # ── Configure stdlib logging (structlog routes through it) ────────────────
    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=handlers,
        force=True,
    )

    # ── Configure structlog ───────────────────────────────────────────────────
    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    def _formatter(renderer: Any) -> structlog.stdlib.ProcessorFormatter:
        return structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=shared_processors,
        )

    if file_handler is not None:
        file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    if console_handler is not None:
        if json_format:
            console_renderer: Any = structlog.processors.JSONRenderer()
        else:
            console_renderer = structlog.dev.ConsoleRenderer(colors=True)
        console_handler.setFormatter(_formatter(console_renderer))


def get_logger(name: str = "runq", **initial_values: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a bound logger with optional initial context values.

    Example:
        log = get_logger(__name__, component="queue")
        log.info("runq.enqueued", count=3)
        # → {"event": "runq.enqueued", "count": 3,
        #    "component": "queue", "logger": "runq.queue", ...}
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


# ─────────────────────────────────────────────────────────────────────────────
# Diagnostic log capability
# ─────────────────────────────────────────────────────────────────────────────

def portable_log(name: str = "runq", **initial_values: Any) -> DiagnosticLog:
    """
    Return a callable ``log(level, event, **fields)`` backed by structlog.

    Usage::

        _log = portable_log(__name__)
        _log("debug", "runq.enqueued", count=2, queue_length=7)
    """
    bound = get_logger(name, **initial_values)

    def _emit(level: str, event: str, **fields: Any) -> None:
        getattr(bound, level)(event, **fields)

    return _emit


def null_log(level: str, event: str, **fields: Any) -> None:
    """Diagnostic sink that discards every line."""


def default_diagnostic_log() -> DiagnosticLog:
    """
    portable_log("runq") when RUNQ_DEBUG is set in settings, else null_log.

    Unreadable or invalid settings also select null_log: the diagnostic
    channel must never stop a queue from being built.
    """
    from pydantic import ValidationError

    from runq.config.settings import get_settings
    from runq.exceptions import ConfigError

    try:
        debug = get_settings().debug
    except (ConfigError, ValidationError):
        return null_log
    if debug:
        return portable_log("runq")
    return null_log


def setup_logging_from_settings(settings: Any) -> None:
    """Call setup_logging() with the values from a RunQSettings.logging section."""
    cfg = settings.logging
    setup_logging(
        level=cfg.level,
        log_dir=cfg.log_dir,
        json_format=cfg.json_format,
        console_output=cfg.console_output,
        max_bytes=cfg.max_file_size_mb * 1024 * 1024,
        backup_count=cfg.backup_count,
    )
