"""
cronlock - Single-host cron job runner with file-lock coordination

Usage:
    from cronlock import Scheduler

    scheduler = Scheduler({"output": "/var/log/cronlock.log", "recipients": "ops@example.com"})

    # Shell command, every 5 minutes, alarm if a run takes over 10 minutes
    scheduler.add("sync", {"command": "rsync -a /data /backup", "schedule": "*/5 * * * *",
                           "max_runtime": 600})

    # Importable function, must return True
    scheduler.add("report", {"function": "reports.daily:send", "schedule": "0 9 * * *",
                             "depends_on": "sync"})

    # Class method call: Cleaner("tmp").purge(7)
    scheduler.add("cleanup", {"class": ["maintenance:Cleaner", ["tmp"], "purge", [7]],
                              "schedule": "@daily"})

    # One tick; call once per minute from crontab:
    # * * * * * cd /path/to/project && python jobs.py
    scheduler.run()
"""

# core first: it loads the adapters in dependency order
from cronlock.core import (
    ConfigError,
    DispatchFailure,
    InformationalSkip,
    JobAlreadyExistsError,
    JobDefinition,
    JobRunner,
    LockHeldError,
    MaxRuntimeExceeded,
    RunState,
    ScheduleError,
    Scheduler,
    SchedulerError,
)
from cronlock.adapters.lock import FileLockAdapter, InMemoryLockAdapter
from cronlock.adapters.notify import MailNotifier

__all__ = [
    # Core
    "Scheduler",
    "JobDefinition",
    "JobRunner",
    "RunState",
    # Exceptions
    "SchedulerError",
    "ConfigError",
    "ScheduleError",
    "JobAlreadyExistsError",
    "LockHeldError",
    "MaxRuntimeExceeded",
    "DispatchFailure",
    "InformationalSkip",
    # Lock Adapters
    "FileLockAdapter",
    "InMemoryLockAdapter",
    # Notifiers
    "MailNotifier",
]
