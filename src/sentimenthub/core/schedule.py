"""Cadence checks and run-state transitions for monitoring subscriptions."""

from datetime import datetime
from typing import Optional, Union

from .constants import MonitorConstants
from .models import Cadence, MonitorState, utc_now


def cadence_hours(cadence: Union[str, Cadence]) -> int:
    value = cadence.value if isinstance(cadence, Cadence) else str(cadence)
    return MonitorConstants.CADENCE_HOURS[value]


def is_due(cadence: Union[str, Cadence], last_run_at: Optional[datetime],
           now: Optional[datetime] = None) -> bool:
    """A subscription is due when it never ran or its cadence window has elapsed."""
    if last_run_at is None:
        return True
    now = now or utc_now()
    elapsed_hours = (now - last_run_at).total_seconds() / 3600.0
    return elapsed_hours >= cadence_hours(cadence)


_TRANSITIONS = {
    MonitorState.IDLE: {MonitorState.DUE},
    MonitorState.DUE: {MonitorState.RUNNING, MonitorState.IDLE},
    MonitorState.RUNNING: {MonitorState.COMPLETED, MonitorState.FAILED},
    MonitorState.COMPLETED: {MonitorState.IDLE},
    MonitorState.FAILED: {MonitorState.IDLE},
}


def advance(state: MonitorState, target: MonitorState) -> MonitorState:
    """Move to ``target`` or raise ValueError for an illegal transition."""
    if target not in _TRANSITIONS[state]:
        raise ValueError(f"Illegal monitor transition {state.value} -> {target.value}")
    return target
