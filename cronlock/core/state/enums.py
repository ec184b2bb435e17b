"""Job run state enumeration."""

from enum import Enum


class RunState(str, Enum):
    """States a JobRunner moves through during one run."""

    PENDING = "pending"  # Created, nothing checked yet
    CHECKING_OVERRUN = "checking_overrun"  # Inspecting the previous run's lock age
    SKIPPED = "skipped"  # Gated out (disabled, halted, wrong host)
    GATE_FAILED = "gate_failed"  # Previous run exceeded max_runtime
    RUNNING = "running"  # Lock held, waiting on dependencies or dispatching
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    RELEASED = "released"  # Lock released, log cleaned up

    def __str__(self) -> str:
        return self.value

    def is_terminal(self) -> bool:
        """Check if no further transition follows this state."""
        return self in (RunState.SKIPPED, RunState.RELEASED)


_TRANSITIONS: dict[RunState, frozenset[RunState]] = {
    RunState.PENDING: frozenset({RunState.CHECKING_OVERRUN}),
    RunState.CHECKING_OVERRUN: frozenset(
        {RunState.SKIPPED, RunState.GATE_FAILED, RunState.RUNNING}
    ),
    RunState.GATE_FAILED: frozenset({RunState.RELEASED}),
    RunState.RUNNING: frozenset({RunState.SUCCEEDED, RunState.FAILED}),
    RunState.SUCCEEDED: frozenset({RunState.RELEASED}),
    RunState.FAILED: frozenset({RunState.RELEASED}),
    RunState.SKIPPED: frozenset(),
    RunState.RELEASED: frozenset(),
}


def can_transition(current: RunState, target: RunState) -> bool:
    """Check whether ``current -> target`` is a valid run state transition."""
    return target in _TRANSITIONS[current]
