"""Execution strategies and dispatcher."""

import io
import shlex
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager, redirect_stderr, redirect_stdout
from dataclasses import dataclass

from cronlock.core.common.exceptions import DispatchFailure, InformationalSkip
from cronlock.core.common.types import Platform
from cronlock.core.execution.job_log import JobLog
from cronlock.core.execution.result import ExecutionResult
from cronlock.core.jobs.config import JobConfig
from cronlock.core.jobs.work_items import ClassMethodCall, FunctionCall, ShellCommand, WorkItem
from cronlock.utils.host import get_platform, is_root
from cronlock.utils.logging import ContextLogger


@dataclass(frozen=True)
class ExecutionContext:
    """What a strategy needs to know about the job it runs."""

    job_name: str
    config: JobConfig
    log: JobLog
    logger: ContextLogger


def describe_error(error: BaseException) -> str:
    """Message written after ``Error!`` for an exception raised by a work item."""
    if isinstance(error, SystemExit):
        return f"Exited with status {error.code}"
    return str(error)


@contextmanager
def captured_output() -> Iterator[io.StringIO]:
    """Buffer everything written to stdout and stderr."""
    buffer = io.StringIO()
    with redirect_stdout(buffer), redirect_stderr(buffer):
        yield buffer


class ExecutionStrategy(ABC):
    """Runs one kind of work item."""

    @abstractmethod
    def execute(self, work: WorkItem, context: ExecutionContext) -> ExecutionResult:
        """
        Run the work item.

        Raises:
            DispatchFailure: Work item failed
            InformationalSkip: Work item short-circuited on purpose
        """
        pass


class ShellStrategy(ExecutionStrategy):
    """Run a shell command in the foreground, output appended to the job log."""

    def build_command(self, work: ShellCommand, config: JobConfig) -> str:
        # Switching user needs root on a POSIX host
        if config.run_as and get_platform() is Platform.UNIX and is_root():
            return f"sudo -u {shlex.quote(config.run_as)} {work.command}"
        return work.command

    def execute(self, work: ShellCommand, context: ExecutionContext) -> ExecutionResult:
        command = self.build_command(work, context.config)
        context.logger.debug("Running shell command", command=command)

        with context.log.appending() as sink:
            completed = subprocess.run(
                command,
                shell=True,
                stdin=subprocess.DEVNULL,
                stdout=sink,
                stderr=subprocess.STDOUT,
            )

        if completed.returncode != 0:
            raise DispatchFailure(f"Job exited with status '{completed.returncode}'.")
        return ExecutionResult.success()


class FunctionStrategy(ExecutionStrategy):
    """
    Call a function that must return ``True``.

    An exception inside the function, ``SystemExit`` included, does not abort
    the run: it is written to the output as ``Error! <message>`` and the run
    fails because ``True`` was never returned.
    """

    def execute(self, work: FunctionCall, context: ExecutionContext) -> ExecutionResult:
        func = work.resolve()

        retval = None
        skip: InformationalSkip | None = None
        with captured_output() as buffer:
            try:
                retval = func()
            except InformationalSkip as e:
                skip = e
            except (Exception, SystemExit) as e:
                context.logger.debug("Function raised", error=repr(e))
                buffer.write(f"Error! {describe_error(e)}\n")

        output = buffer.getvalue()
        context.log.write(output)

        if skip is not None:
            raise skip
        if retval is not True:
            raise DispatchFailure(
                f"Function did not return True! Returned:\n{retval!r}", output=output
            )
        return ExecutionResult.success(output)


class ClassMethodStrategy(ExecutionStrategy):
    """Instantiate a class and call a method on it; the return value is ignored."""

    def execute(self, work: ClassMethodCall, context: ExecutionContext) -> ExecutionResult:
        cls = work.resolve()

        error: BaseException | None = None
        skip: InformationalSkip | None = None
        with captured_output() as buffer:
            try:
                instance = cls(*work.args)
                getattr(instance, work.method)(*work.method_args)
            except InformationalSkip as e:
                skip = e
            except (Exception, SystemExit) as e:
                error = e
                buffer.write(f"Error! {describe_error(e)}\n")

        output = buffer.getvalue()
        context.log.write(output)

        if skip is not None:
            raise skip
        if error is not None:
            message = describe_error(error)
            raise DispatchFailure(
                f"{work.class_name}.{work.method}() raised {type(error).__name__}: {message}",
                output=output,
            )
        return ExecutionResult.success(output)


# Singleton instances for each work item type
_STRATEGIES: dict[type, ExecutionStrategy] = {
    ShellCommand: ShellStrategy(),
    FunctionCall: FunctionStrategy(),
    ClassMethodCall: ClassMethodStrategy(),
}


def get_strategy(work: WorkItem) -> ExecutionStrategy:
    """
    Get execution strategy for a work item.

    Raises:
        ValueError: If the work item type is unknown
    """
    strategy = _STRATEGIES.get(type(work))
    if strategy is None:
        raise ValueError(f"Unknown work item: {work!r}")
    return strategy


class ExecutionDispatcher:
    """Runs a work item with its strategy and folds the outcome into a result."""

    def dispatch(self, work: WorkItem, context: ExecutionContext) -> ExecutionResult:
        strategy = get_strategy(work)
        try:
            return strategy.execute(work, context)
        except InformationalSkip as e:
            return ExecutionResult.skipped(str(e))
        except DispatchFailure as e:
            return ExecutionResult.failure(str(e), e.output)
