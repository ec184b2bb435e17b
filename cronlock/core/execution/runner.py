"""Job runner: one job's lifecycle inside its own process."""

import os
import signal

from cronlock.adapters.base import Lock, LockAdapter, Notifier
from cronlock.adapters.lock.file import FileLockAdapter
from cronlock.adapters.notify.mail import MailNotifier
from cronlock.core.common.exceptions import (
    InformationalSkip,
    MaxRuntimeExceeded,
    SchedulerError,
)
from cronlock.core.common.types import Platform
from cronlock.core.execution.dispatcher import (
    ExecutionContext,
    ExecutionDispatcher,
    describe_error,
)
from cronlock.core.execution.job_log import JobLog
from cronlock.core.execution.result import ExecutionResult, ExecutionStatus
from cronlock.core.execution.waiter import DependencyWaiter
from cronlock.core.jobs.definition import JobDefinition
from cronlock.core.state.enums import RunState, can_transition
from cronlock.utils.host import get_host, get_platform
from cronlock.utils.logging import ContextLogger, get_default_logger


class JobRunner:
    """
    Drives one run of a job.

    State flow::

        PENDING -> CHECKING_OVERRUN -> SKIPPED
                                    -> GATE_FAILED -> RELEASED
                                    -> RUNNING -> SUCCEEDED | FAILED -> RELEASED

    Every exception is caught here: failures surface only as ``ERROR:`` lines
    in the job log and a notification, informational skips as ``INFO:`` lines.
    """

    def __init__(
        self,
        job: JobDefinition,
        lock_adapter: LockAdapter | None = None,
        notifier: Notifier | None = None,
        logger: ContextLogger | None = None,
        waiter: DependencyWaiter | None = None,
    ) -> None:
        self.job = job
        self.config = job.config
        self.logger = (logger or get_default_logger()).for_job(job.name)
        self.locks = lock_adapter or FileLockAdapter(self.config.lock_dir, self.logger)
        self.notifier = notifier or MailNotifier(self.logger)
        self.waiter = waiter or DependencyWaiter(
            self.locks, timeout=self.config.dependency_timeout, logger=self.logger
        )
        self.log = JobLog.for_config(self.config, self.logger)
        self.dispatcher = ExecutionDispatcher()

        self.state = RunState.PENDING
        self.history: list[RunState] = [RunState.PENDING]
        self.result: ExecutionResult | None = None
        self._lock: Lock | None = None

    @property
    def lock_key(self) -> str:
        return self.locks.lock_key(self.job.name, self.config.environment)

    def dependency_keys(self) -> list[str]:
        """Lock keys of ``depends_on`` jobs in this job's environment."""
        environment = self.config.environment
        return [self.locks.lock_key(name, environment) for name in self.config.depends_on]

    def check_max_runtime(self) -> None:
        """
        Raise if the previous run of this job has overrun ``max_runtime``.

        The previous run is not stopped; this only detects and reports.

        Raises:
            MaxRuntimeExceeded: Lock age >= max_runtime, or max_runtime set on Windows
        """
        max_runtime = self.config.max_runtime
        if max_runtime is None:
            return

        if get_platform() is Platform.WINDOWS:
            raise MaxRuntimeExceeded(message="'max_runtime' is not supported on Windows")

        age = self.locks.age_seconds(self.lock_key)
        if age is None:
            return

        runtime = int(age)
        if runtime < max_runtime:
            return

        raise MaxRuntimeExceeded(max_runtime, runtime)

    def should_run(self) -> bool:
        """Enabled, not halted, and on the configured host."""
        if not self.config.enabled:
            return False

        halt_dir = self.config.halt_dir
        if halt_dir is not None and os.path.exists(os.path.join(halt_dir, self.job.name)):
            return False

        run_on_host = self.config.run_on_host
        if run_on_host is not None and run_on_host.lower() != get_host().lower():
            return False

        return True

    def report_error(self, error: Exception | str) -> None:
        """Write an ``ERROR:`` line to the job log and notify."""
        message = str(error)
        self.log.log(f"ERROR: {message}")
        self.logger.error("Job failed", error=message)
        self.notifier.notify(self.job.name, self.config, message)

    def report_info(self, message: str) -> None:
        """Write an ``INFO:`` line to the job log."""
        self.log.log(f"INFO: {message}")
        self.logger.info("Job stopped early", reason=message)

    def run(self) -> RunState:
        """
        Run the job once.

        Returns:
            Final state (SKIPPED or RELEASED)
        """
        try:
            self._run()
        except Exception as e:
            # Bookkeeping failed (e.g. lock release); the run itself is over
            self.logger.error("Job runner failed", exc_info=True, error=str(e))
        return self.state

    def _run(self) -> None:
        self._transition(RunState.CHECKING_OVERRUN)
        try:
            self.check_max_runtime()
        except MaxRuntimeExceeded as e:
            self._transition(RunState.GATE_FAILED)
            try:
                self.report_error(e)
            finally:
                self._finish()
            return

        if not self.should_run():
            self.logger.debug("Job gated out")
            self._transition(RunState.SKIPPED)
            return

        self._transition(RunState.RUNNING)
        try:
            self._execute()
        finally:
            self._finish()

    def _execute(self) -> None:
        try:
            self._lock = self.locks.acquire(self.lock_key)
            self.waiter.wait_all(self.dependency_keys())
            self.result = self.dispatcher.dispatch(self.job.work, self._context())
        except InformationalSkip as e:
            self.result = ExecutionResult.skipped(str(e))
        except (Exception, SystemExit) as e:
            self.result = ExecutionResult.failure(describe_error(e))

        if self.result.status is ExecutionStatus.FAILURE:
            self._transition(RunState.FAILED)
            self.report_error(self.result.message or "Job failed")
        else:
            self._transition(RunState.SUCCEEDED)
            if self.result.status is ExecutionStatus.SKIPPED:
                self.report_info(self.result.message or "")

    def _finish(self) -> None:
        if self.state.is_terminal():
            return
        # Work was interrupted before an outcome was recorded
        if self.state is RunState.RUNNING:
            self._transition(RunState.FAILED)
        try:
            if self._lock is not None:
                self.locks.release(self._lock)
                self._lock = None
        finally:
            self.log.cleanup()
            self._transition(RunState.RELEASED)

    def _context(self) -> ExecutionContext:
        return ExecutionContext(
            job_name=self.job.name,
            config=self.config,
            log=self.log,
            logger=self.logger,
        )

    def _transition(self, target: RunState) -> None:
        if not can_transition(self.state, target):
            raise SchedulerError(f"Invalid run state transition: {self.state} -> {target}")
        self.state = target
        self.history.append(target)


def restore_child_signals() -> None:
    """Undo the scheduler's SIGCHLD ignore so child exit statuses are observable."""
    if hasattr(signal, "SIGCHLD"):
        signal.signal(signal.SIGCHLD, signal.SIG_DFL)


def run_job_process(
    job: JobDefinition,
    lock_adapter: LockAdapter | None = None,
    notifier: Notifier | None = None,
    logger: ContextLogger | None = None,
) -> RunState:
    """Entry point of a launched runner process."""
    restore_child_signals()
    runner = JobRunner(job, lock_adapter=lock_adapter, notifier=notifier, logger=logger)
    return runner.run()
