"""Execution outcome of one dispatch."""

from dataclasses import dataclass
from enum import Enum


class ExecutionStatus(str, Enum):
    """Outcome of a work item."""

    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"  # InformationalSkip raised by the work item

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ExecutionResult:
    """Status, captured output and failure message or skip reason."""

    status: ExecutionStatus
    output: str = ""
    message: str | None = None

    @classmethod
    def success(cls, output: str = "") -> "ExecutionResult":
        return cls(ExecutionStatus.SUCCESS, output)

    @classmethod
    def failure(cls, message: str, output: str = "") -> "ExecutionResult":
        return cls(ExecutionStatus.FAILURE, output, message)

    @classmethod
    def skipped(cls, reason: str, output: str = "") -> "ExecutionResult":
        return cls(ExecutionStatus.SKIPPED, output, reason)

    @property
    def ok(self) -> bool:
        return self.status is not ExecutionStatus.FAILURE
