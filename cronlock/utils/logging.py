"""Structured logging for the scheduler and its runner processes."""

import logging
from typing import Any

LOGGER_NAME = "cronlock"

# time, logger[pid], level, context, message; each runner logs from its own process
LOG_FORMAT = "%(asctime)s - %(name)s[%(process)d] - %(levelname)s - [%(context)s] - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str = LOGGER_NAME, level: int = logging.INFO) -> logging.Logger:
    """
    Configure structured logger.

    Args:
        name: Logger name
        level: Logging level

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)

    return logger


def enable_debug_logging(name: str = LOGGER_NAME) -> None:
    """Lower the package logger and its handlers to DEBUG (``debug`` job option)."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers:
        handler.setLevel(logging.DEBUG)


class ContextLogger:
    """
    Logger wrapper that renders bound context as ``key=value`` pairs.

    ``job_name`` is rendered first as ``job=<name>``; context values that
    are None are left out.
    """

    def __init__(self, logger: logging.Logger, context: dict[str, Any] | None = None) -> None:
        self.logger = logger
        self.context = context or {}

    @property
    def job_name(self) -> str | None:
        return self.context.get("job_name")

    def _format_context(self, extra_context: dict[str, Any] | None = None) -> str:
        ctx = {**self.context, **(extra_context or {})}
        job_name = ctx.pop("job_name", None)
        parts = [f"job={job_name}"] if job_name is not None else []
        parts.extend(f"{k}={v}" for k, v in ctx.items() if v is not None)
        return ", ".join(parts)

    def _log(self, level: int, message: str, exc_info: bool, extra_context: dict[str, Any]) -> None:
        self.logger.log(
            level,
            message,
            extra={"context": self._format_context(extra_context)},
            exc_info=exc_info,
        )

    def info(self, message: str, **extra_context: Any) -> None:
        self._log(logging.INFO, message, False, extra_context)

    def warning(self, message: str, **extra_context: Any) -> None:
        self._log(logging.WARNING, message, False, extra_context)

    def error(self, message: str, exc_info: bool = False, **extra_context: Any) -> None:
        self._log(logging.ERROR, message, exc_info, extra_context)

    def debug(self, message: str, **extra_context: Any) -> None:
        self._log(logging.DEBUG, message, False, extra_context)

    def with_context(self, **context: Any) -> "ContextLogger":
        """Create logger with additional context."""
        return ContextLogger(self.logger, {**self.context, **context})

    def for_job(self, job_name: str) -> "ContextLogger":
        """Logger bound to one job; log lines carry ``job=<name>``."""
        return self.with_context(job_name=job_name)


def get_default_logger(job_name: str | None = None) -> ContextLogger:
    """Return a ContextLogger bound to the package logger, optionally to a job."""
    logger = ContextLogger(_default_logger)
    if job_name is not None:
        return logger.for_job(job_name)
    return logger


# Default logger
_default_logger = setup_logger()
