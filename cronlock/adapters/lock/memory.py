"""In-memory lock adapter for single-process use and testing."""

import os
import threading
import time

from cronlock.adapters.base import Lock, LockAdapter, lock_name
from cronlock.core.common.exceptions import LockHeldError


class InMemoryLockAdapter(LockAdapter):
    """
    In-memory lock adapter (for local development/testing).

    ⚠️ WARNING:
        Locks live in this process only. Runners launched in other processes
        do not see them; use FileLockAdapter for real scheduling.
    """

    shared_across_processes = False

    def __init__(self) -> None:
        # lock_key -> (owner_pid, acquired_at)
        self._locks: dict[str, tuple[int, float]] = {}
        self._mutex = threading.Lock()

    def lock_key(self, job: str, environment: str | None = None) -> str:
        return lock_name(job, environment)

    def acquire(self, lock_key: str) -> Lock:
        with self._mutex:
            if lock_key in self._locks:
                raise LockHeldError(lock_key)
            pid = os.getpid()
            acquired_at = time.time()
            self._locks[lock_key] = (pid, acquired_at)
            return Lock(key=lock_key, owner_pid=pid, acquired_at=acquired_at)

    def release(self, lock: Lock) -> bool:
        with self._mutex:
            held = self._locks.get(lock.key)
            if held is None or held[0] != lock.owner_pid:
                return False
            del self._locks[lock.key]
            return True

    def age_seconds(self, lock_key: str) -> float | None:
        with self._mutex:
            held = self._locks.get(lock_key)
        if held is None:
            return None
        return max(0.0, time.time() - held[1])
