"""Core scheduler components."""

from cronlock.core.common import (
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
    WorkKind,
)
from cronlock.core.execution import (
    DependencyWaiter,
    ExecutionDispatcher,
    ExecutionResult,
    ExecutionStatus,
    JobLog,
    JobRunner,
)
from cronlock.core.jobs import (
    ClassMethodCall,
    FunctionCall,
    JobConfig,
    JobDefinition,
    ShellCommand,
    decode_config,
    encode_config,
)
from cronlock.core.scheduler import Scheduler
from cronlock.core.state import RunState
from cronlock.core.triggers import is_due, validate_schedule

__all__ = [
    # Common Types
    "WorkKind",
    "RunState",
    # Exceptions
    "SchedulerError",
    "SchedulerConfigurationError",
    "ConfigError",
    "ScheduleError",
    "JobAlreadyExistsError",
    "JobRunError",
    "LockHeldError",
    "MaxRuntimeExceeded",
    "DispatchFailure",
    "DependencyTimeoutError",
    "InformationalSkip",
    # Jobs
    "JobDefinition",
    "JobConfig",
    "ShellCommand",
    "FunctionCall",
    "ClassMethodCall",
    "encode_config",
    "decode_config",
    # Scheduling
    "is_due",
    "validate_schedule",
    # Execution
    "DependencyWaiter",
    "ExecutionDispatcher",
    "ExecutionResult",
    "ExecutionStatus",
    "JobLog",
    "JobRunner",
    # Scheduler
    "Scheduler",
]
