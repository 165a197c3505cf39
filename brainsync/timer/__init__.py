"""Timer package."""

from .state import TimerState, TimerSnapshot, ACTIVE_STATES, MAX_RESTORE_GAP_SECONDS
from .engine import TimerEngine, TICK_INTERVAL_MS

__all__ = [
    "TimerEngine",
    "TimerState",
    "TimerSnapshot",
    "ACTIVE_STATES",
    "MAX_RESTORE_GAP_SECONDS",
    "TICK_INTERVAL_MS",
]
