"""Time utilities for cronlock."""

import time
from datetime import datetime


def local_now() -> datetime:
    """
    Get current local time (naive, wall clock).

    Cron schedules are evaluated against the host's wall clock, like crontab.
    """
    return datetime.now()


def truncate_to_minute(dateval: datetime) -> datetime:
    """Drop seconds and microseconds."""
    return dateval.replace(second=0, microsecond=0)


def format_timestamp(date_format: str, timestamp: float | None = None) -> str:
    """
    Format a POSIX timestamp (default: now) with a strftime format.

    Args:
        date_format: strftime format string (e.g. "%Y-%m-%d %H:%M:%S")
        timestamp: Seconds since epoch, None for now

    Returns:
        Formatted local time
    """
    ts = time.time() if timestamp is None else timestamp
    return datetime.fromtimestamp(ts).strftime(date_format)
