"""Unit tests for runner launchers."""

import os
import subprocess
import sys
import time
from unittest.mock import Mock

import pytest
from conftest import wait_for

import cronlock.core.execution.launcher as launcher_module
from cronlock.core.common.exceptions import SchedulerConfigurationError
from cronlock.core.execution import ForkLauncher, SubprocessLauncher
from cronlock.core.jobs import JobDefinition, decode_config

needs_fork = pytest.mark.skipif(not hasattr(os, "fork"), reason="os.fork() is POSIX only")


@pytest.fixture
def shell_job(base_config):
    return JobDefinition.from_config(
        "hello", {"schedule": "* * * * *", "command": "echo hello", **base_config}
    )


class TestSubprocessLauncher:
    """Unit tests for SubprocessLauncher."""

    def test_build_command(self, shell_job):
        """Test the runner module is invoked with the encoded job."""
        command = SubprocessLauncher().build_command(shell_job)

        assert command[:4] == [sys.executable, "-m", "cronlock.run_job", "hello"]
        assert decode_config(command[4]) == shell_job.to_config()

    def test_build_env_keeps_import_path(self, monkeypatch):
        """Test the child sees the scheduler's sys.path."""
        monkeypatch.setenv("PYTHONPATH", "/extra/path")

        env = SubprocessLauncher().build_env()

        paths = env["PYTHONPATH"].split(os.pathsep)
        for entry in sys.path:
            if entry:
                assert entry in paths
        assert "/extra/path" in paths

    def test_launch_detaches(self, shell_job, monkeypatch, tmp_path):
        """Test the runner is started in its own session without waiting."""
        monkeypatch.chdir(tmp_path)
        popen = Mock(return_value=Mock(pid=4242))
        monkeypatch.setattr(launcher_module.subprocess, "Popen", popen)

        pid = SubprocessLauncher().launch(shell_job)

        assert pid == 4242
        kwargs = popen.call_args.kwargs
        assert kwargs["start_new_session"] is True
        assert kwargs["stdin"] is subprocess.DEVNULL
        assert not (tmp_path / "debug.log").exists()

    def test_debug_output(self, base_config, monkeypatch, tmp_path):
        """Test debug mode sends runner output to debug.log."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(launcher_module.subprocess, "Popen", Mock(return_value=Mock(pid=1)))
        job = JobDefinition.from_config(
            "hello", {"schedule": "* * * * *", "command": "ls", "debug": True, **base_config}
        )

        SubprocessLauncher().launch(job)

        assert (tmp_path / "debug.log").exists()

    def test_has_exited(self, shell_job, monkeypatch, tmp_path):
        """Test runner liveness comes from the launched process."""
        monkeypatch.chdir(tmp_path)
        process = Mock(pid=4242, poll=Mock(return_value=None))
        monkeypatch.setattr(launcher_module.subprocess, "Popen", Mock(return_value=process))
        launcher = SubprocessLauncher()
        launcher.launch(shell_job)

        assert not launcher.has_exited(4242)

        process.poll.return_value = 0
        assert launcher.has_exited(4242)
        # Unknown runners count as finished
        assert launcher.has_exited(1)


class TestForkLauncher:
    """Unit tests for ForkLauncher."""

    def test_without_fork(self, shell_job, monkeypatch):
        """Test a clear error where os.fork() is missing."""
        monkeypatch.setattr(launcher_module, "fork_supported", lambda: False)

        with pytest.raises(SchedulerConfigurationError):
            ForkLauncher(Mock()).launch(shell_job)

    @needs_fork
    def test_child_runs_target(self, shell_job, tmp_path):
        """Test the target runs in the child and the child exits cleanly."""
        marker = tmp_path / "marker"

        def target(job):
            marker.write_text(job.name)

        pid = ForkLauncher(target).launch(shell_job)
        _, status = os.waitpid(pid, 0)

        assert pid != os.getpid()
        assert os.waitstatus_to_exitcode(status) == 0
        assert marker.read_text() == "hello"

    @needs_fork
    def test_child_exits_non_zero_when_target_raises(self, shell_job):
        """Test an escaping exception ends the child with status 1."""

        def target(job):
            raise RuntimeError("boom")

        pid = ForkLauncher(target).launch(shell_job)
        _, status = os.waitpid(pid, 0)

        assert os.waitstatus_to_exitcode(status) == 1

    @needs_fork
    def test_has_exited(self, shell_job):
        """Test a forked runner is seen running, then finished."""
        launcher = ForkLauncher(lambda job: time.sleep(1))

        pid = launcher.launch(shell_job)

        assert not launcher.has_exited(pid)
        wait_for(lambda: launcher.has_exited(pid), timeout=10)
        # Already reaped
        assert launcher.has_exited(pid)
