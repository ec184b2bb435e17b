"""Launch a job runner as a concurrent unit of work.

Two backends:
    - SubprocessLauncher: new interpreter running ``python -m cronlock.run_job``;
      the job configuration is encoded on the command line.
    - ForkLauncher: ``os.fork()``; the child inherits the scheduler's memory,
      so work items holding live objects (closures, classes) need no encoding.
"""

import os
import subprocess
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable

from cronlock.core.common.exceptions import SchedulerConfigurationError
from cronlock.core.common.types import LaunchBackend
from cronlock.core.jobs.codec import encode_config
from cronlock.core.jobs.definition import JobDefinition
from cronlock.utils.host import get_null_device
from cronlock.utils.logging import ContextLogger, get_default_logger

RUNNER_MODULE = "cronlock.run_job"
DEBUG_LOG = "debug.log"


def fork_supported() -> bool:
    return hasattr(os, "fork")


class Launcher(ABC):
    """Starts a runner for a job and returns without waiting for it."""

    backend: LaunchBackend

    @abstractmethod
    def launch(self, job: JobDefinition) -> int:
        """
        Start a runner for ``job``.

        Returns:
            PID of the launched process
        """
        pass

    def has_exited(self, pid: int) -> bool:
        """Check whether the runner with ``pid`` has finished."""
        try:
            reaped, _ = os.waitpid(pid, os.WNOHANG)
        except ChildProcessError:
            # Reaped already, by us or by the OS when SIGCHLD is ignored
            return True
        return reaped != 0


class SubprocessLauncher(Launcher):
    """Runs each job in a fresh, detached interpreter."""

    backend = LaunchBackend.SUBPROCESS

    def __init__(self, logger: ContextLogger | None = None) -> None:
        self.logger = logger or get_default_logger()
        self._processes: list[subprocess.Popen] = []

    def build_command(self, job: JobDefinition) -> list[str]:
        return [sys.executable, "-m", RUNNER_MODULE, job.name, encode_config(job.to_config())]

    def build_env(self) -> dict[str, str]:
        """Environment for the child: the scheduler's import path is kept."""
        paths = [p for p in sys.path if isinstance(p, str) and p]
        existing = os.environ.get("PYTHONPATH")
        if existing:
            paths.append(existing)
        return {**os.environ, "PYTHONPATH": os.pathsep.join(dict.fromkeys(paths))}

    def launch(self, job: JobDefinition) -> int:
        command = self.build_command(job)
        output = DEBUG_LOG if job.config.debug else get_null_device()

        # Forget runners that finished since the last launch
        self._processes = [p for p in self._processes if p.poll() is None]

        with open(output, "ab") as sink:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=sink,
                stderr=subprocess.STDOUT,
                env=self.build_env(),
                start_new_session=True,
            )
        self._processes.append(process)
        return process.pid

    def has_exited(self, pid: int) -> bool:
        for process in self._processes:
            if process.pid == pid:
                return process.poll() is not None
        return True


class ForkLauncher(Launcher):
    """Runs each job in a forked child of the scheduler process."""

    backend = LaunchBackend.FORK

    def __init__(
        self,
        target: Callable[[JobDefinition], object],
        logger: ContextLogger | None = None,
    ) -> None:
        """
        Initialize fork launcher.

        Args:
            target: Called with the job in the child process
            logger: Custom logger (uses default if None)
        """
        self.target = target
        self.logger = logger or get_default_logger()

    def launch(self, job: JobDefinition) -> int:
        if not fork_supported():
            raise SchedulerConfigurationError(
                f"Job '{job.name}' needs os.fork(), which this platform does not provide"
            )

        # Unflushed parent output would otherwise be written twice
        sys.stdout.flush()
        sys.stderr.flush()

        pid = os.fork()
        if pid == 0:
            status = 1
            try:
                self.target(job)
                status = 0
            finally:
                os._exit(status)
        return pid
