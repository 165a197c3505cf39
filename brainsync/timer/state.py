"""Timer states and the persisted timer snapshot.

States
------
IDLE       Not running — waiting for a start.  Initial and re-entrant.
WORKING    Work interval counting down.
BREAKING   Break interval (short or long) counting down.
PAUSED     Frozen; ``previous_state`` remembers what to resume into.

Snapshot invariants
-------------------
- ``remaining_seconds <= total_duration_seconds``
- ``start_timestamp`` is set iff the state is WORKING or BREAKING
- ``previous_state`` is set iff the state is PAUSED
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class TimerState(Enum):
    IDLE = "idle"
    WORKING = "working"
    BREAKING = "breaking"
    PAUSED = "paused"


ACTIVE_STATES = (TimerState.WORKING, TimerState.BREAKING)

# Elapsed gaps beyond this on restore are treated as corrupted state.
MAX_RESTORE_GAP_SECONDS = 86400


def _number(data: dict, key: str, default: float | None = None) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number")
    if not math.isfinite(value):
        raise ValueError(f"field {key!r} must be finite")
    return value


def _optional_timestamp(data: dict, key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be an epoch-ms number")
    if not math.isfinite(value):
        raise ValueError(f"field {key!r} must be finite")
    return int(value)


@dataclass
class TimerSnapshot:
    """Everything needed to rebuild the timer after a restart."""

    state: TimerState = TimerState.IDLE
    previous_state: TimerState | None = None
    remaining_seconds: float = 0
    total_duration_seconds: float = 0
    set_index: int = 1
    start_timestamp: int | None = None      # epoch ms
    paused_at_timestamp: int | None = None  # epoch ms
    session_start: str | None = None        # ISO-8601, start of the interval
    planned_seconds: float = 0              # configured length at start

    @classmethod
    def idle(cls, set_index: int = 1) -> TimerSnapshot:
        return cls(set_index=max(1, set_index))

    def copy(self) -> TimerSnapshot:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "previous_state": self.previous_state.value if self.previous_state else None,
            "remaining_seconds": self.remaining_seconds,
            "total_duration_seconds": self.total_duration_seconds,
            "set_index": self.set_index,
            "start_timestamp": self.start_timestamp,
            "paused_at_timestamp": self.paused_at_timestamp,
            "session_start": self.session_start,
            "planned_seconds": self.planned_seconds,
        }

    @classmethod
    def from_dict(cls, data: Any) -> TimerSnapshot:
        """Validate and build a snapshot; ``ValueError`` on bad shape."""
        if not isinstance(data, dict):
            raise ValueError("timer snapshot must be an object")
        state_value = data.get("state")
        if not isinstance(state_value, str):
            raise ValueError("field 'state' must be a string")
        state = TimerState(state_value)

        previous_value = data.get("previous_state")
        previous = TimerState(previous_value) if previous_value else None
        if previous is not None and previous not in ACTIVE_STATES:
            raise ValueError(f"invalid previous_state {previous_value!r}")

        remaining = _number(data, "remaining_seconds")
        set_index = _number(data, "set_index")
        total = _number(data, "total_duration_seconds", remaining)
        session_start = data.get("session_start")
        if session_start is not None and not isinstance(session_start, str):
            raise ValueError("field 'session_start' must be a string")

        return cls(
            state=state,
            previous_state=previous,
            remaining_seconds=max(0, remaining),
            total_duration_seconds=max(0, total),
            set_index=max(1, int(set_index)),
            start_timestamp=_optional_timestamp(data, "start_timestamp"),
            paused_at_timestamp=_optional_timestamp(data, "paused_at_timestamp"),
            session_start=session_start,
            planned_seconds=_number(data, "planned_seconds", total),
        )
