"""Unit tests for custom exceptions and their messages."""

import pytest

from cronlock.core.common.exceptions import (
    ConfigError,
    DependencyTimeoutError,
    DispatchFailure,
    InformationalSkip,
    JobAlreadyExistsError,
    JobRunError,
    LockHeldError,
    MaxRuntimeExceeded,
    ScheduleError,
    SchedulerConfigurationError,
    SchedulerError,
)


class TestSchedulerError:
    """Test base SchedulerError class."""

    def test_simple_message(self):
        """Test error with simple message."""
        error = SchedulerError("Something went wrong")
        assert str(error) == "Something went wrong"

    def test_base_class_hierarchy(self):
        """Test the exception hierarchy structure."""
        # Registration errors
        assert issubclass(ConfigError, SchedulerConfigurationError)
        assert issubclass(JobAlreadyExistsError, ConfigError)
        assert issubclass(ScheduleError, SchedulerConfigurationError)
        assert issubclass(SchedulerConfigurationError, SchedulerError)

        # Run errors
        assert issubclass(LockHeldError, JobRunError)
        assert issubclass(MaxRuntimeExceeded, JobRunError)
        assert issubclass(DispatchFailure, JobRunError)
        assert issubclass(DependencyTimeoutError, JobRunError)
        assert issubclass(JobRunError, SchedulerError)

        # Informational
        assert issubclass(InformationalSkip, SchedulerError)
        assert not issubclass(InformationalSkip, JobRunError)

    def test_catch_all_scheduler_errors(self):
        """Test that every error can be caught as SchedulerError."""
        with pytest.raises(SchedulerError):
            raise LockHeldError("/tmp/job.lck")


class TestRunErrorMessages:
    """Test messages written to job logs and notifications."""

    def test_lock_held(self):
        """Test lock contention message."""
        error = LockHeldError("/tmp/prod-job.lck")

        assert error.lock_key == "/tmp/prod-job.lck"
        assert str(error) == "Job is still running (Lock: /tmp/prod-job.lck)."

    def test_max_runtime_exceeded(self):
        """Test overrun message."""
        error = MaxRuntimeExceeded(60, 75)

        assert error.max_runtime == 60
        assert error.runtime == 75
        assert str(error) == "MaxRuntime of 60 secs exceeded! Current runtime: 75 secs"

    def test_max_runtime_custom_message(self):
        """Test overrun with explicit message."""
        error = MaxRuntimeExceeded(message="not supported")

        assert str(error) == "not supported"
        assert error.runtime is None

    def test_dispatch_failure_keeps_output(self):
        """Test dispatch failures carry captured output."""
        error = DispatchFailure("Job exited with status '2'.", output="partial\n")

        assert str(error) == "Job exited with status '2'."
        assert error.output == "partial\n"

    def test_dependency_timeout(self):
        """Test dependency timeout message."""
        error = DependencyTimeoutError(["a.lck", "b.lck"], 30)

        assert error.pending == ["a.lck", "b.lck"]
        assert str(error) == "Dependencies still running after 30 secs: a.lck, b.lck"

    def test_schedule_error(self):
        """Test schedule error with and without reason."""
        assert str(ScheduleError("* *", "expected 5 fields")) == (
            "Invalid schedule '* *': expected 5 fields"
        )
        assert str(ScheduleError("x")) == "Invalid schedule 'x'"
