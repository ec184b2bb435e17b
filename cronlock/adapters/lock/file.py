"""Filesystem lock adapter."""

import os
import time

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_random_exponential

from cronlock.adapters.base import Lock, LockAdapter, lock_name
from cronlock.core.common.exceptions import LockHeldError
from cronlock.utils.host import get_temp_dir, pid_exists
from cronlock.utils.logging import ContextLogger, get_default_logger

LOCK_SUFFIX = ".lck"


class FileLockAdapter(LockAdapter):
    """
    One lock file per (job, environment), created with ``O_CREAT | O_EXCL``.

    The file holds the PID of the owning process and its mtime is the
    acquisition time. Exclusive create is atomic on local filesystems, so two
    processes can never both succeed for the same key.

    A lock whose owner PID no longer exists (POSIX) is stale: it is reported as
    not held and is reclaimed by the next ``acquire``.

    Example:
        >>> locks = FileLockAdapter("/var/run/cronlock")
        >>> key = locks.lock_key("backup", environment="prod")
        >>> lock = locks.acquire(key)
        >>> try:
        ...     pass  # Do work
        ... finally:
        ...     locks.release(lock)
    """

    def __init__(self, lock_dir: str | None = None, logger: ContextLogger | None = None) -> None:
        """
        Initialize file lock adapter.

        Args:
            lock_dir: Directory for lock files (default: system temp dir)
            logger: Custom logger (uses default if None)
        """
        self.lock_dir = lock_dir or get_temp_dir()
        self.logger = logger or get_default_logger()

    def lock_key(self, job: str, environment: str | None = None) -> str:
        return os.path.join(self.lock_dir, lock_name(job, environment) + LOCK_SUFFIX)

    def acquire(self, lock_key: str) -> Lock:
        for attempt in range(2):
            try:
                fd = os.open(lock_key, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
            except FileExistsError:
                if attempt == 0 and self._reclaim_stale(lock_key):
                    continue
                raise LockHeldError(lock_key) from None

            pid = os.getpid()
            with os.fdopen(fd, "w") as fh:
                fh.write(str(pid))
            return Lock(key=lock_key, owner_pid=pid, acquired_at=time.time())

        raise LockHeldError(lock_key)

    def release(self, lock: Lock) -> bool:
        owner = self._read_owner(lock.key)
        if owner is not None and owner != lock.owner_pid:
            self.logger.warning(
                "Lock is owned by another process, not releasing",
                lock_key=lock.key,
                owner_pid=owner,
            )
            return False
        return self._unlink_with_retry(lock.key)

    def age_seconds(self, lock_key: str) -> float | None:
        try:
            mtime = os.stat(lock_key).st_mtime
        except FileNotFoundError:
            return None

        if self._is_stale(lock_key):
            return None

        return max(0.0, time.time() - mtime)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_random_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _unlink_with_retry(self, path: str) -> bool:
        """Remove a lock file with automatic retry and jitter."""
        try:
            os.unlink(path)
        except FileNotFoundError:
            return False
        return True

    def _read_owner(self, lock_key: str) -> int | None:
        """PID recorded in a lock file; None if absent, empty or unreadable."""
        try:
            with open(lock_key) as fh:
                content = fh.read().strip()
        except OSError:
            return None
        try:
            return int(content)
        except ValueError:
            return None

    def _is_stale(self, lock_key: str) -> bool:
        # A lock still being written has no PID yet and counts as live
        owner = self._read_owner(lock_key)
        return owner is not None and not pid_exists(owner)

    def _reclaim_stale(self, lock_key: str) -> bool:
        owner = self._read_owner(lock_key)
        if owner is None or pid_exists(owner):
            return False

        # Re-check right before removal to narrow the race with another reclaimer
        if self._read_owner(lock_key) != owner:
            return False

        self.logger.warning("Removing stale lock", lock_key=lock_key, owner_pid=owner)
        self._unlink_with_retry(lock_key)
        return True
