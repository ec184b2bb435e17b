"""Tick-driven job scheduler."""

import signal
import threading
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from tenacity import RetryError, Retrying, retry_if_result, stop_after_delay, wait_fixed

from cronlock.adapters.base import LockAdapter, Notifier
from cronlock.adapters.lock.file import FileLockAdapter
from cronlock.core.common.exceptions import (
    ConfigError,
    DispatchFailure,
    JobAlreadyExistsError,
    SchedulerConfigurationError,
)
from cronlock.core.common.types import LaunchBackend
from cronlock.core.execution.launcher import (
    ForkLauncher,
    Launcher,
    SubprocessLauncher,
    fork_supported,
)
from cronlock.core.execution.runner import JobRunner, run_job_process
from cronlock.core.jobs.config import DEFAULT_DATE_FORMAT
from cronlock.core.jobs.definition import JobDefinition
from cronlock.core.jobs.work_items import ClassMethodCall
from cronlock.core.state.enums import RunState
from cronlock.core.triggers.cron import is_due
from cronlock.utils.host import get_application_env, get_host, get_temp_dir
from cronlock.utils.logging import ContextLogger, get_default_logger
from cronlock.utils.time import local_now

DEPENDENCY_START_TIMEOUT = 10.0
DEPENDENCY_START_POLL_SECONDS = 0.05


class Scheduler:
    """
    Holds the job registry; each ``run()`` call is one tick.

    Meant to be invoked once per minute (e.g. from crontab). A tick evaluates
    every job's schedule and launches a runner process for each due job
    without waiting for it to finish. Runners coordinate with each other only
    through lock files.

    Example:
        >>> scheduler = Scheduler({"output": "/var/log/cronlock.log"})
        >>> scheduler.add("backup", {"command": "backup.sh", "schedule": "0 3 * * *"})
        >>> scheduler.add(
        ...     "report",
        ...     {"function": "reports.daily:send", "schedule": "0 9 * * mon-fri",
        ...      "depends_on": "backup", "recipients": "ops@example.com"},
        ... )
        >>> scheduler.run()
    """

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        lock_adapter: LockAdapter | None = None,
        notifier: Notifier | None = None,
        logger: ContextLogger | None = None,
        ignore_child_signals: bool = True,
    ) -> None:
        """
        Initialize scheduler.

        Args:
            config: Process-wide defaults merged over ``get_default_config()``
            lock_adapter: Lock adapter for forked runners (default: file locks
                in each job's ``lock_dir``). Subprocess runners always use
                file locks. It must be shared across processes, since every
                forked runner gets its own copy.
            notifier: Notifier for forked runners and launch failures
                (default: MailNotifier)
            logger: Custom logger (uses default if None)
            ignore_child_signals: Ignore SIGCHLD so launched runners are
                reaped by the OS instead of lingering as zombies

        Raises:
            SchedulerConfigurationError: ``lock_adapter`` is not shared across
                processes
        """
        if lock_adapter is not None and not lock_adapter.shared_across_processes:
            raise SchedulerConfigurationError(
                f"{type(lock_adapter).__name__} locks are not visible to runner processes"
            )

        self.logger = logger or get_default_logger()
        self.lock_adapter = lock_adapter
        self.notifier = notifier

        self._config: dict[str, Any] = self.get_default_config()
        self.set_config(config or {})
        self._jobs: dict[str, JobDefinition] = {}

        self._launchers: dict[LaunchBackend, Launcher] = {
            LaunchBackend.SUBPROCESS: SubprocessLauncher(self.logger),
            LaunchBackend.FORK: ForkLauncher(self._run_forked, self.logger),
        }

        if ignore_child_signals:
            self._ignore_child_signals()

    @staticmethod
    def get_default_config() -> dict[str, Any]:
        """Default table merged under every job's configuration."""
        host = get_host()
        return {
            "recipients": None,
            "mailer": "sendmail",
            "max_runtime": None,
            "smtp_host": None,
            "smtp_port": 25,
            "smtp_username": None,
            "smtp_password": None,
            "smtp_sender": f"cronlock@{host}",
            "smtp_sender_name": "cronlock",
            "smtp_security": None,
            "run_as": None,
            "environment": get_application_env(),
            "run_on_host": host,
            "output": None,
            "date_format": DEFAULT_DATE_FORMAT,
            "enabled": True,
            "halt_dir": None,
            "debug": False,
            "lock_dir": get_temp_dir(),
            "dependency_timeout": None,
        }

    def set_config(self, config: Mapping[str, Any]) -> None:
        """Merge ``config`` over the current process-wide defaults."""
        self._config = {**self._config, **config}

    def get_config(self) -> dict[str, Any]:
        return dict(self._config)

    def get_jobs(self) -> list[JobDefinition]:
        return list(self._jobs.values())

    def add(self, name: str, config: Mapping[str, Any]) -> JobDefinition:
        """
        Register a job.

        Args:
            name: Unique job name
            config: ``schedule``, exactly one of ``command`` / ``function`` /
                ``class``, and any ``JobConfig`` options

        Returns:
            Normalized job definition

        Raises:
            ConfigError: Missing schedule, absent or ambiguous work item,
                invalid option, or duplicate name
            ScheduleError: Malformed schedule
        """
        if name in self._jobs:
            raise JobAlreadyExistsError(f"Job '{name}' already exists")

        if not config.get("schedule"):
            raise ConfigError(f"'schedule' is required for '{name}' job")

        job = JobDefinition.from_config(name, {**self._config, **config})

        if job.work.backend is LaunchBackend.FORK and not fork_supported():
            raise ConfigError(
                f"'{name}' job needs os.fork(); use a shell command or an importable function"
            )

        self._jobs[name] = job
        self.logger.debug("Job added", job_name=name, kind=job.work.kind.value)
        return job

    def run(self, now: datetime | None = None) -> list[str]:
        """
        Run one tick: launch every due job and return.

        Due jobs are launched dependencies first. Before a job is launched,
        each of its dependencies started in the same tick must have taken its
        lock (or already exited), so the job's runner cannot miss a run it
        has to wait for.

        Args:
            now: Tick time (default: current local time)

        Returns:
            Names of the jobs that were launched
        """
        now = now or local_now()
        due = [job for job in self._jobs.values() if is_due(job.schedule, now)]

        started: dict[str, int] = {}
        for job in launch_order(due):
            self._await_dependencies_started(job, started)
            pid = self._launch(job)
            if pid is not None:
                started[job.name] = pid

        return list(started)

    def _launch(self, job: JobDefinition) -> int | None:
        job_logger = self.logger.for_job(job.name)
        try:
            # Missing class or method fails here, before a worker exists
            if isinstance(job.work, ClassMethodCall):
                job.work.resolve()
            launcher = self._launchers[job.work.backend]
            pid = launcher.launch(job)
        except (DispatchFailure, SchedulerConfigurationError, OSError) as e:
            job_logger.error("Job launch failed", error=str(e))
            JobRunner(
                job, lock_adapter=self.lock_adapter, notifier=self.notifier, logger=self.logger
            ).report_error(e)
            return None

        job_logger.info("Job launched", pid=pid, backend=job.work.backend.value)
        return pid

    def _await_dependencies_started(self, job: JobDefinition, started: Mapping[str, int]) -> None:
        dependencies = [
            self._jobs[name]
            for name in job.config.depends_on
            if name in started and self._jobs[name].config.environment == job.config.environment
        ]
        if not dependencies:
            return

        def not_started() -> list[str]:
            return [
                dependency.name
                for dependency in dependencies
                if not self._locks_for(dependency).is_held(self._lock_key(dependency))
                and not self._launchers[dependency.work.backend].has_exited(
                    started[dependency.name]
                )
            ]

        retrying = Retrying(
            retry=retry_if_result(bool),
            wait=wait_fixed(DEPENDENCY_START_POLL_SECONDS),
            stop=stop_after_delay(DEPENDENCY_START_TIMEOUT),
        )
        try:
            retrying(not_started)
        except RetryError as e:
            self.logger.for_job(job.name).warning(
                "Dependencies did not start in time",
                pending=",".join(e.last_attempt.result()),
            )

    def _locks_for(self, job: JobDefinition) -> LockAdapter:
        """Lock adapter the job's runner will use."""
        if job.work.backend is LaunchBackend.FORK and self.lock_adapter is not None:
            return self.lock_adapter
        return FileLockAdapter(job.config.lock_dir, self.logger)

    def _lock_key(self, job: JobDefinition) -> str:
        return self._locks_for(job).lock_key(job.name, job.config.environment)

    def _run_forked(self, job: JobDefinition) -> RunState:
        return run_job_process(
            job, lock_adapter=self.lock_adapter, notifier=self.notifier, logger=self.logger
        )

    def _ignore_child_signals(self) -> None:
        if not hasattr(signal, "SIGCHLD"):
            return
        if threading.current_thread() is not threading.main_thread():
            self.logger.warning("SIGCHLD disposition can only be set from the main thread")
            return
        signal.signal(signal.SIGCHLD, signal.SIG_IGN)


def launch_order(jobs: list[JobDefinition]) -> list[JobDefinition]:
    """
    Order jobs so that each comes after the jobs it depends on.

    Only dependencies within ``jobs`` and the same environment count.
    Otherwise registration order is kept, and a dependency cycle is broken
    where it is first entered.
    """
    by_name = {job.name: job for job in jobs}
    ordered: list[JobDefinition] = []
    visited: set[str] = set()

    def visit(job: JobDefinition) -> None:
        if job.name in visited:
            return
        visited.add(job.name)
        for name in job.config.depends_on:
            dependency = by_name.get(name)
            if dependency is not None and dependency.config.environment == job.config.environment:
                visit(dependency)
        ordered.append(job)

    for job in jobs:
        visit(job)
    return ordered
