"""Job run state."""

from cronlock.core.state.enums import RunState, can_transition

__all__ = ["RunState", "can_transition"]
