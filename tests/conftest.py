"""Common test fixtures and utilities."""

import os
import signal
import time
from collections.abc import Callable
from unittest.mock import Mock

import pytest

from cronlock import FileLockAdapter, Scheduler
from cronlock.adapters.base import Notifier
from cronlock.utils.logging import get_default_logger


def wait_for(
    condition: Callable[[], bool],
    timeout: float = 10.0,
    interval: float = 0.1,
    error_message: str | None = None,
) -> bool:
    """
    Wait until condition is True, polling at interval (eventually pattern).

    Args:
        condition: Function that returns bool
        timeout: Maximum wait time in seconds
        interval: Polling interval in seconds
        error_message: Custom error message if timeout

    Returns:
        True if condition met

    Raises:
        AssertionError: If timeout exceeded

    Example:
        wait_for(lambda: os.path.exists(log_file), timeout=10)
    """
    start = time.time()
    last_exception = None

    while time.time() - start < timeout:
        try:
            if condition():
                return True
        except Exception as e:
            # Store exception to report if timeout
            last_exception = e
        time.sleep(interval)

    elapsed = time.time() - start
    if error_message is None:
        error_message = f"Condition not met within {timeout}s (elapsed: {elapsed:.2f}s)"

    if last_exception:
        error_message += f"\nLast exception: {last_exception}"

    raise AssertionError(error_message)


def eventually(
    assertion_fn: Callable[[], None],
    timeout: float = 10.0,
    interval: float = 0.1,
) -> None:
    """
    Repeatedly call assertion_fn until it passes (no exception) or timeout.

    Raises:
        AssertionError: If assertions never pass within timeout
    """
    start = time.time()
    last_error = None

    while time.time() - start < timeout:
        try:
            assertion_fn()
            return
        except AssertionError as e:
            last_error = e
            time.sleep(interval)

    elapsed = time.time() - start
    if last_error:
        raise AssertionError(
            f"Assertions never passed within {timeout}s (elapsed: {elapsed:.2f}s)\n"
            f"Last assertion error: {last_error}"
        )
    raise AssertionError(f"No assertions passed within {timeout}s")


def read_file(path: str) -> str:
    """Contents of ``path``, empty string if it does not exist."""
    if not os.path.exists(path):
        return ""
    with open(path, encoding="utf-8") as fh:
        return fh.read()


@pytest.fixture(autouse=True)
def restore_child_signal_disposition():
    """Runners reset SIGCHLD; keep the test process's disposition unchanged."""
    if not hasattr(signal, "SIGCHLD"):
        yield
        return
    previous = signal.getsignal(signal.SIGCHLD)
    yield
    signal.signal(signal.SIGCHLD, previous)


@pytest.fixture
def lock_dir(tmp_path) -> str:
    path = tmp_path / "locks"
    path.mkdir()
    return str(path)


@pytest.fixture
def log_file(tmp_path) -> str:
    return str(tmp_path / "job.log")


@pytest.fixture
def base_config(lock_dir, log_file) -> dict:
    """Scheduler defaults isolated to the test's temp dir."""
    return {
        "lock_dir": lock_dir,
        "output": log_file,
        "environment": None,
        "run_on_host": None,
    }


@pytest.fixture
def scheduler(base_config):
    """Scheduler that leaves SIGCHLD alone so the test process can wait on children."""
    return Scheduler(base_config, ignore_child_signals=False)


@pytest.fixture
def file_locks(lock_dir):
    return FileLockAdapter(lock_dir)


@pytest.fixture
def mock_notifier():
    """Create a mock notifier."""
    notifier = Mock(spec=Notifier)
    notifier.notify = Mock(return_value=True)
    return notifier


@pytest.fixture
def logger():
    return get_default_logger().with_context(test=True)
