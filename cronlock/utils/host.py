"""Host, platform and process environment helpers."""

import os
import socket
import sys
import tempfile

from cronlock.core.common.types import Platform


def get_host() -> str:
    """Current hostname."""
    return socket.gethostname()


def get_platform() -> Platform:
    """Platform family of the running interpreter."""
    if sys.platform.startswith("win"):
        return Platform.WINDOWS
    return Platform.UNIX


def get_application_env() -> str | None:
    """Deployment environment name from ``APPLICATION_ENV``, if set."""
    return os.environ.get("APPLICATION_ENV") or None


def get_temp_dir() -> str:
    """Directory used for lock files when none is configured."""
    return tempfile.gettempdir()


def get_null_device() -> str:
    return os.devnull


def is_root() -> bool:
    """True when running with uid 0 on POSIX."""
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def pid_exists(pid: int) -> bool:
    """
    Check whether a process with ``pid`` is alive (POSIX only).

    On Windows this always returns True: liveness cannot be probed
    with a null signal there.
    """
    if pid <= 0:
        return False
    if get_platform() is Platform.WINDOWS:
        return True
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, owned by someone else
        return True
    return True
