# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Loguru setup shared by the server, the shell and the tests."""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from pathlib import Path

from loguru import logger as _logger

from treasury.shared.config import LoggingConfig

from .sensitive_filter import sanitize_record

_FMT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_CORRELATION_ID: ContextVar[str] = ContextVar("correlation_id", default="-")

# Chatty third-party loggers capped at WARNING.
_QUIET_LOGGERS = ("werkzeug", "sqlalchemy.engine", "sqlalchemy.pool")


def default_log_file() -> Path:
    return Path.cwd() / "instance" / "treasury.log"


class _InterceptHandler(logging.Handler):
    """Forwards stdlib records (werkzeug, SQLAlchemy) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        _logger.bind(correlation_id=_CORRELATION_ID.get()).opt(
            depth=depth, exception=record.exc_info
        ).log(level, record.getMessage())


class ContextualLogger:
    """Proxy for loguru that injects correlation ids via ContextVar."""

    def __getattr__(self, name):
        bound = _logger.bind(correlation_id=_CORRELATION_ID.get())
        return getattr(bound, name)


def set_correlation_id(value: str | None) -> None:
    _CORRELATION_ID.set(value or "-")


def get_correlation_id() -> str:
    return _CORRELATION_ID.get()


def clear_correlation_id() -> None:
    _CORRELATION_ID.set("-")


def setup_logging(config: LoggingConfig | None = None, *, debug_mode: bool = False) -> Path:
    """Install the stderr and rotating file sinks; returns the log file path."""
    config = config or LoggingConfig()  # type: ignore[call-arg]
    level = "DEBUG" if debug_mode else config.level
    log_file = config.file or default_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    _logger.remove()
    _logger.configure(extra={"correlation_id": "-"})
    _logger.add(
        sys.stderr,
        level=level,
        format=_FMT,
        filter=sanitize_record,
        colorize=config.colorize,
        backtrace=debug_mode,
        diagnose=False,
    )
    _logger.add(
        log_file,
        level=level,
        format=_FMT,
        filter=sanitize_record,
        colorize=False,
        backtrace=False,
        diagnose=False,
        enqueue=True,
        rotation=config.rotation,
        retention=config.retention,
        encoding="utf-8",
    )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _logger.bind(correlation_id="-").info(f"logging: level={level} file={log_file}")
    return log_file


logger = ContextualLogger()

__all__ = [
    "ContextualLogger",
    "clear_correlation_id",
    "default_log_file",
    "get_correlation_id",
    "logger",
    "set_correlation_id",
    "setup_logging",
]
