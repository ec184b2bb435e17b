"""Job execution: dispatch, coordination and launching."""

from cronlock.core.execution.dispatcher import ExecutionContext, ExecutionDispatcher, get_strategy
from cronlock.core.execution.job_log import JobLog
from cronlock.core.execution.launcher import ForkLauncher, Launcher, SubprocessLauncher
from cronlock.core.execution.result import ExecutionResult, ExecutionStatus
from cronlock.core.execution.runner import JobRunner, run_job_process
from cronlock.core.execution.waiter import DependencyWaiter

__all__ = [
    "ExecutionContext",
    "ExecutionDispatcher",
    "ExecutionResult",
    "ExecutionStatus",
    "get_strategy",
    "JobLog",
    "DependencyWaiter",
    "Launcher",
    "SubprocessLauncher",
    "ForkLauncher",
    "JobRunner",
    "run_job_process",
]
