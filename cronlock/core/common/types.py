"""Common type definitions for cronlock."""

from enum import Enum


class WorkKind(Enum):
    """Kind of work a job carries."""

    COMMAND = "command"  # Shell command
    FUNCTION = "function"  # Python callable
    CLASS = "class"  # Class instantiation + method call


class LaunchBackend(Enum):
    """How a runner process is started."""

    SUBPROCESS = "subprocess"  # New interpreter, config encoded on argv
    FORK = "fork"  # Forked worker inheriting scheduler memory


class Platform(Enum):
    """Host platform family."""

    UNIX = "unix"
    WINDOWS = "windows"
