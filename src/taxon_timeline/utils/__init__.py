"""Utility helpers shared across taxon_timeline modules."""

from .logging import configure_logging, get_logger, log_timing, logging_context

__all__ = [
    "configure_logging",
    "get_logger",
    "logging_context",
    "log_timing",
]
