"""Utility helpers."""

from cronlock.utils.logging import (
    ContextLogger,
    enable_debug_logging,
    get_default_logger,
    setup_logger,
)

__all__ = [
    "ContextLogger",
    "enable_debug_logging",
    "get_default_logger",
    "setup_logger",
]
