"""Common components shared across core modules."""

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
from cronlock.core.common.types import LaunchBackend, Platform, WorkKind

__all__ = [
    # Types
    "WorkKind",
    "LaunchBackend",
    "Platform",
    # Exceptions
    "SchedulerError",
    "SchedulerConfigurationError",
    "ConfigError",
    "JobAlreadyExistsError",
    "ScheduleError",
    "JobRunError",
    "LockHeldError",
    "MaxRuntimeExceeded",
    "DispatchFailure",
    "DependencyTimeoutError",
    "InformationalSkip",
]
