"""Centralised logging configuration built on loguru."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from loguru import logger

from ..config.settings import Settings, get_settings

_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[project]}</cyan> | "
    "<magenta>{extra[dataset]}</magenta> | "
    "{message}"
)


def configure_logging(settings: Settings | None = None, level: str | None = None) -> None:
    """Initialise loguru sinks according to the active settings."""

    cfg = settings or get_settings()
    resolved_level = level or cfg.log_level

    logger.remove()
    logger.configure(extra={"project": "-", "dataset": "-"})
    logger.add(
        sys.stderr,
        level=resolved_level,
        backtrace=False,
        diagnose=False,
        format=_LOG_FORMAT,
    )
    if cfg.log_to_file:
        log_path = cfg.log_file
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            rotation="10 MB",
            retention="14 days",
            format=_LOG_FORMAT,
            level=resolved_level,
        )


def get_logger(**context: Any):
    """Return a contextualised logger instance."""

    return logger.bind(**context)


@contextmanager
def logging_context(**context: Any):
    """Context manager that temporarily binds structured context fields."""

    with logger.contextualize(**context):
        yield logger


@contextmanager
def log_timing(step: str, *, logger_=logger):
    """Log elapsed time for a block at debug level."""

    start = datetime.now()
    try:
        yield
    finally:
        elapsed = (datetime.now() - start).total_seconds()
        logger_.debug("Step timing", step=step, seconds=elapsed)


__all__ = ["configure_logging", "get_logger", "logging_context", "log_timing"]
