"""Timer state machine for BrainSync.

Transitions
-----------
any → WORKING                  (start_work)
any → BREAKING                 (start_break)
WORKING | BREAKING → PAUSED    (pause)
PAUSED → {whatever was paused} (resume)
{running} → IDLE               (timer reaches 0, completion handling)
any → IDLE                     (reset)
BREAKING → WORKING             (skip_break, also from a paused break)

Remaining time is always recomputed from the wall-clock start timestamp,
never decremented per tick, so a late or missed tick cannot drift the
countdown and a restart can pick up where the last process left off.

Set counting
------------
``set_index`` is incremented when a work interval completes, *before*
``work_completed`` is emitted, and wrapped back to 1 only after every
handler has returned.  Inside a ``work_completed`` handler
``is_long_break_due()`` is therefore True for exactly the session that
closes a long-break cycle.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..settings import Settings, SettingsProvider, load_settings
from ..stats.models import SessionKind, SessionRecord
from ..timeutil import epoch_ms, iso_from_epoch, seconds_to_minutes
from .state import (
    ACTIVE_STATES,
    MAX_RESTORE_GAP_SECONDS,
    TimerSnapshot,
    TimerState,
)


logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000


class TimerEngine(QObject):
    """Qt-based Pomodoro timer with persistence and restart recovery.

    Signals
    -------
    tick(remaining_seconds: float, state: TimerState)
        Emitted every second while an interval runs, and once right after
        every transition.
    state_changed(new_state: TimerState)
        Emitted on every state transition.
    work_completed(record: SessionRecord)
        A work interval ran to natural expiry.
    break_completed(record: SessionRecord)
        A break interval ran to natural expiry.

    All signals are delivered synchronously on the caller's thread.
    """

    tick = pyqtSignal(float, object)
    state_changed = pyqtSignal(object)
    work_completed = pyqtSignal(object)
    break_completed = pyqtSignal(object)

    def __init__(
        self,
        storage=None,
        parent: QObject | None = None,
        *,
        settings: SettingsProvider = load_settings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(parent)

        self._storage = storage
        self._settings_provider = settings
        self._settings: Settings = settings()
        self._clock = clock

        self._data = TimerSnapshot.idle()
        # bumped whenever a new interval begins or the timer is reset
        self._interval_serial = 0

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        return self._data.state

    @property
    def previous_state(self) -> TimerState | None:
        return self._data.previous_state

    @property
    def remaining(self) -> float:
        """Seconds left in the current interval."""
        return self._data.remaining_seconds

    @property
    def total_duration(self) -> float:
        return self._data.total_duration_seconds

    @property
    def set_index(self) -> int:
        """Position within the long-break cycle (1-based)."""
        return self._data.set_index

    @property
    def is_running(self) -> bool:
        """True when actively counting down (not IDLE, not PAUSED)."""
        return self._data.state in ACTIVE_STATES

    @property
    def is_breaking(self) -> bool:
        """True during a break, running or paused."""
        return self._data.state == TimerState.BREAKING or (
            self._data.state == TimerState.PAUSED
            and self._data.previous_state == TimerState.BREAKING
        )

    @property
    def long_break_interval(self) -> int:
        return self._settings.long_break_interval

    def snapshot(self) -> TimerSnapshot:
        """A copy of the current state, safe to keep."""
        return self._data.copy()

    def is_long_break_due(self) -> bool:
        return self._data.set_index > self._settings.long_break_interval

    def reload_settings(self) -> None:
        self._settings = self._settings_provider()

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start_work(self) -> None:
        """Start a work interval.  Valid from any state."""
        self.reload_settings()
        self._begin_interval(TimerState.WORKING, self._settings.work_duration * 60)

    def start_break(self, is_long: bool = False) -> None:
        """Start a short or long break.  Valid from any state."""
        self.reload_settings()
        minutes = self._settings.long_break if is_long else self._settings.short_break
        self._begin_interval(TimerState.BREAKING, minutes * 60)

    def pause(self) -> None:
        if self._data.state not in ACTIVE_STATES:
            return
        self._qt_timer.stop()
        self._sync_remaining()

        data = self._data
        data.previous_state = data.state
        data.state = TimerState.PAUSED
        data.start_timestamp = None
        data.paused_at_timestamp = epoch_ms(self._clock())

        self._persist()
        self._announce()

    def resume(self) -> None:
        """Resume from PAUSED back to whatever was running."""
        data = self._data
        if data.state != TimerState.PAUSED or data.previous_state is None:
            return

        data.state = data.previous_state
        data.previous_state = None
        data.total_duration_seconds = data.remaining_seconds
        data.start_timestamp = epoch_ms(self._clock())
        data.paused_at_timestamp = None

        self._persist()
        self._qt_timer.start()
        self._announce()

    def toggle_pause(self) -> None:
        if self._data.state == TimerState.PAUSED:
            self.resume()
        elif self._data.state in ACTIVE_STATES:
            self.pause()

    def reset(self) -> SessionRecord | None:
        """Abandon the current interval and return to IDLE.

        Returns an aborted ``SessionRecord`` when a running or paused
        interval was interrupted, ``None`` when the timer was idle.  The
        set counter is preserved.
        """
        self._qt_timer.stop()
        record: SessionRecord | None = None

        data = self._data
        if data.state in ACTIVE_STATES or data.state == TimerState.PAUSED:
            if data.state in ACTIVE_STATES:
                self._sync_remaining()
            interrupted = data.previous_state if data.state == TimerState.PAUSED else data.state
            planned = max(data.planned_seconds, data.total_duration_seconds)
            end_time = iso_from_epoch(self._clock())
            record = SessionRecord(
                start_time=data.session_start or end_time,
                end_time=end_time,
                duration_minutes=seconds_to_minutes(planned - data.remaining_seconds),
                kind=SessionKind.BREAK if interrupted == TimerState.BREAKING else SessionKind.WORK,
                completed=False,
            )

        self._interval_serial += 1
        self._data = TimerSnapshot.idle(data.set_index)
        self._persist()
        self.state_changed.emit(TimerState.IDLE)
        self.tick.emit(0.0, TimerState.IDLE)
        return record

    def skip_break(self) -> None:
        """Drop the current break (no record) and start working."""
        if not self.is_breaking:
            return
        self._qt_timer.stop()
        self.start_work()

    def restore(self) -> None:
        """Reload the last persisted snapshot.  Call once at start-up."""
        self.reload_settings()
        saved = self._storage.load_timer() if self._storage is not None else TimerSnapshot.idle()

        if saved.state == TimerState.IDLE:
            self._data = TimerSnapshot.idle(saved.set_index)
            return

        if saved.state == TimerState.PAUSED:
            if saved.previous_state is None:
                self._discard(saved, "paused without a state to resume into")
                return
            self._data = saved
            self._announce()
            return

        if saved.start_timestamp is None:
            self._discard(saved, "running without a start timestamp")
            return

        elapsed = (epoch_ms(self._clock()) - saved.start_timestamp) / 1000
        if elapsed < 0 or elapsed > MAX_RESTORE_GAP_SECONDS:
            self._discard(saved, f"implausible elapsed time {elapsed:.0f}s")
            return

        self._data = saved
        remaining = saved.total_duration_seconds - elapsed
        if remaining <= 0:
            saved.remaining_seconds = 0
            self._complete_interval()
            return

        saved.remaining_seconds = remaining
        self._qt_timer.start()
        self._announce()

    def dispose(self) -> None:
        self._qt_timer.stop()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — timer mechanics
    # ══════════════════════════════════════════════════════════════════

    def _begin_interval(self, state: TimerState, seconds: float) -> None:
        self._qt_timer.stop()
        now = self._clock()

        data = self._data
        data.state = state
        data.previous_state = None
        data.remaining_seconds = seconds
        data.total_duration_seconds = seconds
        data.planned_seconds = seconds
        data.start_timestamp = epoch_ms(now)
        data.paused_at_timestamp = None
        data.session_start = iso_from_epoch(now)
        self._interval_serial += 1

        self._persist()
        self._qt_timer.start()
        self._announce()

    def _sync_remaining(self) -> None:
        data = self._data
        if data.start_timestamp is None:
            return
        elapsed = (epoch_ms(self._clock()) - data.start_timestamp) / 1000
        total = data.total_duration_seconds
        data.remaining_seconds = min(total, max(0.0, total - elapsed))

    def _on_tick(self) -> None:
        if self._data.state not in ACTIVE_STATES:
            return
        self._sync_remaining()
        if self._data.remaining_seconds <= 0:
            self._complete_interval()
        else:
            self.tick.emit(float(self._data.remaining_seconds), self._data.state)

    def _complete_interval(self) -> None:
        self._qt_timer.stop()
        self.reload_settings()

        data = self._data
        end_time = iso_from_epoch(self._clock())
        planned = data.planned_seconds or data.total_duration_seconds
        finished = data.state
        record = SessionRecord(
            start_time=data.session_start or end_time,
            end_time=end_time,
            duration_minutes=seconds_to_minutes(planned),
            kind=SessionKind.WORK if finished == TimerState.WORKING else SessionKind.BREAK,
            completed=True,
        )

        serial = self._interval_serial
        if finished == TimerState.WORKING:
            data.set_index += 1
            self.work_completed.emit(record)
            # Handlers have read the un-normalised counter; wrap it now.
            if self._data.set_index > self._settings.long_break_interval:
                self._data.set_index = 1
        else:
            self.break_completed.emit(record)

        if self._interval_serial != serial:
            # A handler already moved on (started or reset an interval).
            self._persist()
            return

        self._data = TimerSnapshot.idle(self._data.set_index)
        self._persist()
        self.state_changed.emit(TimerState.IDLE)

    def _discard(self, saved: TimerSnapshot, reason: str) -> None:
        logger.warning("Discarding persisted timer state: %s", reason)
        self._data = TimerSnapshot.idle(saved.set_index)
        self._persist()

    def _announce(self) -> None:
        self.state_changed.emit(self._data.state)
        self.tick.emit(float(self._data.remaining_seconds), self._data.state)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — persistence
    # ══════════════════════════════════════════════════════════════════

    def _persist(self) -> None:
        if self._storage is not None:
            self._storage.save_timer(self._data.copy())
