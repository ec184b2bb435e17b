"""Custom exceptions for cronlock."""


class SchedulerError(Exception):
    """Base exception for scheduler errors."""

    pass


# ---------------------------------------------------------------------------
# Registration errors (raised by Scheduler.add, fatal to that call only)
# ---------------------------------------------------------------------------


class SchedulerConfigurationError(SchedulerError):
    """Job or scheduler configuration is invalid."""

    pass


class ConfigError(SchedulerConfigurationError):
    """Missing schedule, or an absent or ambiguous work item."""

    pass


class JobAlreadyExistsError(ConfigError):
    """Job with the same name is already registered."""

    pass


class ScheduleError(SchedulerConfigurationError):
    """Malformed schedule expression."""

    def __init__(self, schedule: object, reason: str | None = None) -> None:
        self.schedule = schedule
        message = f"Invalid schedule '{schedule}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Run errors (raised inside a JobRunner, logged and mailed there)
# ---------------------------------------------------------------------------


class JobRunError(SchedulerError):
    """Error raised while a job run is in progress."""

    pass


class LockHeldError(JobRunError):
    """Lock for the job is held by another run."""

    def __init__(self, lock_key: str) -> None:
        self.lock_key = lock_key
        super().__init__(f"Job is still running (Lock: {lock_key}).")


class MaxRuntimeExceeded(JobRunError):
    """Previous run of the job has been running for at least max_runtime."""

    def __init__(
        self,
        max_runtime: int | None = None,
        runtime: int | None = None,
        message: str | None = None,
    ) -> None:
        self.max_runtime = max_runtime
        self.runtime = runtime
        if message is None:
            message = (
                f"MaxRuntime of {max_runtime} secs exceeded! Current runtime: {runtime} secs"
            )
        super().__init__(message)


class DispatchFailure(JobRunError):
    """Work item failed: non-zero exit, bad return value, missing class or method."""

    def __init__(self, message: str, output: str = "") -> None:
        self.output = output
        super().__init__(message)


class DependencyTimeoutError(JobRunError):
    """Dependencies were still running when the configured wait timed out."""

    def __init__(self, pending: list[str], timeout: float) -> None:
        self.pending = pending
        self.timeout = timeout
        super().__init__(
            f"Dependencies still running after {timeout} secs: {', '.join(pending)}"
        )


# ---------------------------------------------------------------------------
# Informational
# ---------------------------------------------------------------------------


class InformationalSkip(SchedulerError):
    """
    Expected short-circuit inside a run.

    Logged at INFO level and never mailed. Tasks may raise it to end a run
    without it being reported as a failure.
    """

    pass
