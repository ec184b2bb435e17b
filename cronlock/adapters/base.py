"""Abstract base classes for adapters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from cronlock.core.jobs.config import JobConfig


@dataclass(frozen=True)
class Lock:
    """Handle for an acquired lock, owned by the run that acquired it."""

    key: str
    owner_pid: int
    acquired_at: float


class LockAdapter(ABC):
    """Advisory lock adapter abstract class."""

    # Locks are visible to runners in other processes
    shared_across_processes: bool = True

    @abstractmethod
    def lock_key(self, job: str, environment: str | None = None) -> str:
        """
        Build the lock identity of a (job, environment) pair.

        ┌──────────────────────────────────────────────────────────────┐
        │                   IMPLEMENTATION CONTRACT                     │
        ├──────────────────────────────────────────────────────────────┤
        │ WHO CALLS:      JobRunner (own lock and dependency locks)    │
        │ MUST:           Be deterministic and collision-free across   │
        │                 distinct (job, environment) pairs            │
        └──────────────────────────────────────────────────────────────┘
        """
        pass

    @abstractmethod
    def acquire(self, lock_key: str) -> Lock:
        """
        Acquire a lock without blocking.

        ┌──────────────────────────────────────────────────────────────┐
        │                   IMPLEMENTATION CONTRACT                     │
        ├──────────────────────────────────────────────────────────────┤
        │ WHO CALLS:      JobRunner, before dependencies and dispatch  │
        │ MUST:           Be atomic against concurrent acquirers in    │
        │                 other processes; fail fast, never wait       │
        └──────────────────────────────────────────────────────────────┘

        Args:
            lock_key: Lock identity from ``lock_key()``

        Returns:
            Lock handle

        Raises:
            LockHeldError: Lock is held by another run
        """
        pass

    @abstractmethod
    def release(self, lock: Lock) -> bool:
        """
        Release a lock. Idempotent.

        ┌──────────────────────────────────────────────────────────────┐
        │                   IMPLEMENTATION CONTRACT                     │
        ├──────────────────────────────────────────────────────────────┤
        │ WHO CALLS:      JobRunner, on every exit path of a run that  │
        │                 acquired the lock                            │
        │ MUST:           Not fail if the record was removed already   │
        └──────────────────────────────────────────────────────────────┘

        Returns:
            True if a record was removed, False if it was already gone
        """
        pass

    @abstractmethod
    def age_seconds(self, lock_key: str) -> float | None:
        """
        Age of a held lock, without taking ownership.

        ┌──────────────────────────────────────────────────────────────┐
        │                   IMPLEMENTATION CONTRACT                     │
        ├──────────────────────────────────────────────────────────────┤
        │ WHO CALLS:      JobRunner (overrun check), DependencyWaiter  │
        │ RETURNS:        Seconds since acquisition, None if not held  │
        └──────────────────────────────────────────────────────────────┘
        """
        pass

    def is_held(self, lock_key: str) -> bool:
        return self.age_seconds(lock_key) is not None


class Notifier(ABC):
    """Failure notification adapter abstract class."""

    @abstractmethod
    def notify(self, job_name: str, config: JobConfig, message: str) -> bool:
        """
        Deliver a failure message for a job.

        ┌──────────────────────────────────────────────────────────────┐
        │                   IMPLEMENTATION CONTRACT                     │
        ├──────────────────────────────────────────────────────────────┤
        │ WHO CALLS:      JobRunner after an error or overrun          │
        │ MUST:           Never raise; delivery failure is logged only │
        └──────────────────────────────────────────────────────────────┘

        Args:
            job_name: Job name
            config: Job configuration (recipients, mailer, SMTP settings)
            message: Failure message

        Returns:
            True if the message was handed to the transport
        """
        pass


def escape_lock_component(value: str) -> str:
    """
    Percent-escape a job or environment name for use in a lock name.

    Everything except ASCII letters, digits, ``_`` and ``.`` is escaped,
    including ``-`` (the environment separator) and path separators.
    """
    return "".join(
        char if char.isascii() and (char.isalnum() or char in "_.") else
        "".join(f"%{byte:02X}" for byte in char.encode("utf-8"))
        for char in value
    )


def lock_name(job: str, environment: str | None = None) -> str:
    """``{environment-}{job}``, both parts escaped."""
    name = escape_lock_component(job)
    if environment:
        return f"{escape_lock_component(environment)}-{name}"
    return name
