"""Adapter pattern implementations for locks and notifications."""

from cronlock.adapters.base import Lock, LockAdapter, Notifier, lock_name

__all__ = [
    "Lock",
    "LockAdapter",
    "Notifier",
    "lock_name",
]
