"""Lock adapters."""

from cronlock.adapters.lock.file import FileLockAdapter
from cronlock.adapters.lock.memory import InMemoryLockAdapter

__all__ = ["FileLockAdapter", "InMemoryLockAdapter"]
