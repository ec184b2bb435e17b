"""Per-job log sink."""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, BinaryIO

from cronlock.core.common.types import Platform
from cronlock.core.jobs.config import DEFAULT_DATE_FORMAT, JobConfig
from cronlock.utils.host import get_null_device, get_platform
from cronlock.utils.logging import ContextLogger, get_default_logger
from cronlock.utils.time import format_timestamp

_fcntl: Any = None


def _get_fcntl() -> Any:
    """Lazy import fcntl (Unix only)."""
    global _fcntl
    if _fcntl is None and get_platform() is Platform.UNIX:
        import fcntl

        _fcntl = fcntl
    return _fcntl


def _same_file(fd: int, path: str) -> bool:
    """Check that ``path`` still names the file open as ``fd``."""
    try:
        on_disk = os.stat(path)
    except FileNotFoundError:
        return False
    opened = os.fstat(fd)
    return (on_disk.st_dev, on_disk.st_ino) == (opened.st_dev, opened.st_ino)


class JobLog:
    """
    Append-only log file of a job, path taken verbatim from ``output``.

    With no path configured, lines and output are discarded. Several jobs
    may share one file: appenders hold a shared ``flock`` on it, and an
    empty file is only removed while nobody is appending (POSIX).
    """

    def __init__(
        self,
        path: str | None,
        date_format: str = DEFAULT_DATE_FORMAT,
        logger: ContextLogger | None = None,
    ) -> None:
        self.path = path or None
        self.date_format = date_format
        self.logger = logger or get_default_logger()

    @classmethod
    def for_config(cls, config: JobConfig, logger: ContextLogger | None = None) -> "JobLog":
        return cls(config.output, config.date_format, logger)

    @contextmanager
    def appending(self) -> Iterator[BinaryIO]:
        """
        Open the log for appending, held against ``cleanup()`` until closed.

        Yields:
            Binary file object (the null device when no path is configured)
        """
        if not self.path:
            with open(get_null_device(), "ab") as sink:
                yield sink
            return

        while True:
            sink = open(self.path, "ab")
            fcntl = _get_fcntl()
            if fcntl is None:
                break
            fcntl.flock(sink.fileno(), fcntl.LOCK_SH)
            # A cleanup between open and flock unlinked the file; open it again
            if _same_file(sink.fileno(), self.path):
                break
            sink.close()

        with sink:
            yield sink

    def log(self, message: str) -> None:
        """Append ``[timestamp] message``."""
        self.write(f"[{format_timestamp(self.date_format)}] {message}\n")

    def write(self, content: str) -> None:
        """Append raw content."""
        if not self.path or not content:
            return
        try:
            with self.appending() as sink:
                sink.write(content.encode("utf-8"))
        except OSError as e:
            self.logger.warning("Cannot write job log", path=self.path, error=str(e))

    def read(self) -> str:
        if not self.path:
            return ""
        try:
            with open(self.path, encoding="utf-8") as fh:
                return fh.read()
        except FileNotFoundError:
            return ""

    def cleanup(self) -> bool:
        """
        Remove the log file if it exists, is empty and nobody is appending to it.

        Returns:
            True if a file was removed
        """
        if not self.path or not os.path.isfile(self.path):
            return False
        try:
            fd = os.open(self.path, os.O_RDONLY)
        except FileNotFoundError:
            return False

        try:
            fcntl = _get_fcntl()
            if fcntl is not None:
                try:
                    fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                except BlockingIOError:
                    # Another run still has the file open for output
                    return False
            if os.fstat(fd).st_size != 0 or not _same_file(fd, self.path):
                return False
            os.unlink(self.path)
            return True
        except FileNotFoundError:
            return False
        finally:
            os.close(fd)
