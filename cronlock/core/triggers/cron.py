"""Cron schedule evaluation."""

from datetime import datetime

from croniter import croniter

from cronlock.core.common.exceptions import ScheduleError
from cronlock.utils.time import truncate_to_minute

# Standard five-field crontab: minute hour day-of-month month day-of-week
CRON_FIELD_COUNT = 5

# Macros understood by croniter and crontab(5)
CRON_MACROS = frozenset(
    {"@yearly", "@annually", "@monthly", "@weekly", "@daily", "@midnight", "@hourly"}
)

# One-off run at a fixed minute
DATETIME_FORMAT = "%Y-%m-%d %H:%M"


def _parse_datetime(schedule: str) -> datetime | None:
    try:
        return datetime.strptime(schedule.strip(), DATETIME_FORMAT)
    except ValueError:
        return None


def validate_schedule(schedule: object) -> str:
    """
    Validate a schedule expression.

    Accepted forms:
        - five-field cron expression ("*/5 * * * *", "0 9 * * mon-fri")
        - crontab macros ("@hourly", "@daily", ...)
        - one-off timestamp "YYYY-MM-DD HH:MM"

    Args:
        schedule: Schedule expression

    Returns:
        Normalized expression (surrounding whitespace stripped)

    Raises:
        ScheduleError: If the expression is not a valid schedule
    """
    if not isinstance(schedule, str) or not schedule.strip():
        raise ScheduleError(schedule, "schedule must be a non-empty string")

    expr = schedule.strip()

    if _parse_datetime(expr) is not None:
        return expr

    if expr.startswith("@"):
        if expr.lower() not in CRON_MACROS:
            raise ScheduleError(schedule, "unknown macro")
        return expr

    if len(expr.split()) != CRON_FIELD_COUNT:
        raise ScheduleError(schedule, f"expected {CRON_FIELD_COUNT} fields")

    if not croniter.is_valid(expr):
        raise ScheduleError(schedule)

    return expr


def is_due(schedule: str, now: datetime) -> bool:
    """
    Check whether a schedule matches ``now`` at minute resolution.

    Stateless and side-effect free.

    Args:
        schedule: Validated schedule expression
        now: Tick time

    Returns:
        True if the job is due in the minute containing ``now``
    """
    expr = schedule.strip()
    minute = truncate_to_minute(now)

    run_at = _parse_datetime(expr)
    if run_at is not None:
        return run_at == minute.replace(tzinfo=None)

    return bool(croniter.match(expr, minute))
