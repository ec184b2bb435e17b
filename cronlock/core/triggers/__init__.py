"""Schedule evaluation."""

from cronlock.core.triggers.cron import is_due, validate_schedule

__all__ = [
    "is_due",
    "validate_schedule",
]
