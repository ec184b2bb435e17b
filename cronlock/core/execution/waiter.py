"""Wait for dependency locks to be released."""

import time
from collections.abc import Callable, Iterable

from tenacity import RetryError, Retrying, retry_if_result, stop_after_delay, stop_never, wait_fixed

from cronlock.adapters.base import LockAdapter
from cronlock.core.common.exceptions import DependencyTimeoutError
from cronlock.utils.logging import ContextLogger, get_default_logger

POLL_INTERVAL_SECONDS = 0.1


class DependencyWaiter:
    """
    Blocks until none of a set of peer locks is held.

    All locks must be observed absent in the same check. This orders a job
    after the runs of its dependencies that are in progress when it starts;
    it is not a barrier against a dependency re-acquiring its lock later.
    """

    def __init__(
        self,
        locks: LockAdapter,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        timeout: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: ContextLogger | None = None,
    ) -> None:
        """
        Initialize dependency waiter.

        Args:
            locks: Lock adapter used to inspect peer locks
            poll_interval: Seconds between checks
            timeout: Give up after this many seconds (None = wait forever)
            sleep: Sleep function (injectable for tests)
            logger: Custom logger (uses default if None)
        """
        self.locks = locks
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._sleep = sleep
        self.logger = logger or get_default_logger()

    def pending(self, lock_keys: Iterable[str]) -> list[str]:
        """Lock keys that are currently held."""
        return [key for key in lock_keys if self.locks.age_seconds(key) is not None]

    def wait_all(self, lock_keys: Iterable[str]) -> None:
        """
        Block until every lock in ``lock_keys`` is free.

        Raises:
            DependencyTimeoutError: ``timeout`` elapsed with locks still held
        """
        keys = list(lock_keys)
        if not keys:
            return

        retrying = Retrying(
            retry=retry_if_result(bool),
            wait=wait_fixed(self.poll_interval),
            stop=stop_after_delay(self.timeout) if self.timeout is not None else stop_never,
            sleep=self._sleep,
        )

        self.logger.debug("Waiting for dependencies", locks=",".join(keys))
        try:
            retrying(self.pending, keys)
        except RetryError as e:
            pending = e.last_attempt.result()
            raise DependencyTimeoutError(pending, self.timeout or 0) from None
