"""Unit tests for host and time helpers."""

import os
import subprocess
import sys
from datetime import datetime

from cronlock.core.common.types import Platform
from cronlock.utils.host import get_application_env, get_platform, pid_exists
from cronlock.utils.time import format_timestamp, truncate_to_minute


class TestHostUtils:
    """Unit tests for cronlock.utils.host."""

    def test_application_env(self, monkeypatch):
        """Test APPLICATION_ENV lookup."""
        monkeypatch.setenv("APPLICATION_ENV", "prod")
        assert get_application_env() == "prod"

        monkeypatch.setenv("APPLICATION_ENV", "")
        assert get_application_env() is None

    def test_platform(self):
        """Test platform detection."""
        expected = Platform.WINDOWS if sys.platform.startswith("win") else Platform.UNIX
        assert get_platform() is expected

    def test_own_pid_exists(self):
        """Test the current process is alive."""
        assert pid_exists(os.getpid())

    def test_invalid_pid(self):
        """Test non-positive PIDs never exist."""
        assert not pid_exists(0)
        assert not pid_exists(-1)

    def test_exited_process(self):
        """Test a reaped child is gone (POSIX)."""
        process = subprocess.Popen([sys.executable, "-c", "pass"])
        process.wait()

        if get_platform() is Platform.UNIX:
            assert not pid_exists(process.pid)


class TestTimeUtils:
    """Unit tests for cronlock.utils.time."""

    def test_truncate_to_minute(self):
        """Test seconds and microseconds are dropped."""
        assert truncate_to_minute(datetime(2024, 1, 1, 10, 5, 59, 999)) == datetime(2024, 1, 1, 10, 5)

    def test_format_timestamp(self):
        """Test formatting a fixed timestamp."""
        ts = datetime(2024, 3, 15, 12, 30, 45).timestamp()

        assert format_timestamp("%Y-%m-%d %H:%M:%S", ts) == "2024-03-15 12:30:45"
