"""Component wiring for BrainSync.

``BrainSyncApp`` owns the timer, the storage and the alert policy and
connects timer completions to session accounting.  It has no UI of its
own: presentation layers (status indicator, toasts, sounds) subscribe to
its signals.
"""

from __future__ import annotations

import functools
import logging
import time
from datetime import date, datetime
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .alerts import FatigueAlertPolicy
from .database.storage import Storage
from .settings import SettingsProvider, load_settings
from .stats.aggregator import export_rows, format_csv, record_session, recompute_week
from .stats.fatigue import fatigue_level
from .stats.models import SessionRecord, Statistics
from .timer.engine import TimerEngine
from .timer.state import TimerState


logger = logging.getLogger(__name__)

AUTO_START_DELAY_MS = 500


class BrainSyncApp(QObject):
    """Timer + statistics + alerts, wired together.

    Signals
    -------
    work_notice(data: dict)
        A work interval finished and notifications are on.  Keys:
        ``session``, ``set_index``, ``long_break_interval``,
        ``long_break_due``, ``fatigue_score``, ``fatigue_level``.
    break_notice(data: dict)
        A break finished and notifications are on.  Key: ``session``.
    fatigue_alert(data: dict)
        The fatigue score crossed the alert threshold.  Keys: ``score``,
        ``level``.
    fatigue_flag_changed(over_threshold: bool)
        Emitted after every recorded session for the status indicator.
    """

    work_notice = pyqtSignal(object)
    break_notice = pyqtSignal(object)
    fatigue_alert = pyqtSignal(object)
    fatigue_flag_changed = pyqtSignal(bool)

    def __init__(
        self,
        storage: Storage | None = None,
        parent: QObject | None = None,
        *,
        settings: SettingsProvider = load_settings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(parent)
        self._storage = storage if storage is not None else Storage()
        self._settings_provider = settings
        self._clock = clock

        self._timer = TimerEngine(self._storage, self, settings=settings, clock=clock)
        self._alerts = FatigueAlertPolicy(self._storage, settings)

        self._timer.work_completed.connect(self._on_work_completed)
        self._timer.break_completed.connect(self._on_break_completed)

    # ── accessors ─────────────────────────────────────────────────────

    @property
    def timer(self) -> TimerEngine:
        return self._timer

    @property
    def storage(self) -> Storage:
        return self._storage

    def _today(self) -> date:
        return date.fromtimestamp(self._clock())

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock()).astimezone()

    # ── lifecycle ─────────────────────────────────────────────────────

    def restore(self) -> None:
        """Restore the timer and refresh the fatigue indicator."""
        self._timer.restore()
        stats = self._storage.load_statistics(self._today())
        if stats.today.date == self._today().isoformat():
            self.fatigue_flag_changed.emit(
                self._alerts.is_over_threshold(stats.today.fatigue_score)
            )

    def dispose(self) -> None:
        self._timer.dispose()

    # ── commands ──────────────────────────────────────────────────────

    def start(self) -> None:
        """Start working from IDLE, or resume a paused interval."""
        state = self._timer.state
        if state == TimerState.IDLE:
            self._timer.start_work()
        elif state == TimerState.PAUSED:
            self._timer.toggle_pause()

    def toggle_pause(self) -> None:
        self._timer.toggle_pause()

    def skip_break(self) -> None:
        self._timer.skip_break()

    def reset(self) -> SessionRecord | None:
        """Reset the timer; an interrupted work interval is accounted."""
        record = self._timer.reset()
        if record is not None and record.is_work and not record.completed:
            self.record_session(record)
        return record

    def record_session(self, session: SessionRecord) -> Statistics | None:
        """Fold *session* into the stored statistics and persist them."""
        try:
            today, now = self._today(), self._now()
            stats = self._storage.load_statistics(today)
            record_session(stats, session, today, now)
            recompute_week(stats, today, now)
            self._storage.save_statistics(stats)
        except Exception:
            logger.exception("Failed to record session %s", session.id)
            return None
        self.fatigue_flag_changed.emit(
            self._alerts.is_over_threshold(stats.today.fatigue_score)
        )
        return stats

    def view_stats(self) -> Statistics:
        """Current statistics with a freshly derived week, persisted."""
        today = self._today()
        stats = self._storage.load_statistics(today)
        recompute_week(stats, today, self._now())
        self._storage.save_statistics(stats)
        return stats

    def export_csv(self, range_: str = "all") -> str:
        stats = self.view_stats()
        return format_csv(export_rows(stats, range_, self._today()))

    def reset_statistics(self) -> None:
        self._storage.reset_statistics()
        self.fatigue_flag_changed.emit(False)

    # ── timer event handlers ──────────────────────────────────────────

    def _on_work_completed(self, session: SessionRecord) -> None:
        stats = self.record_session(session)
        score = stats.today.fatigue_score if stats is not None else 0
        settings = self._settings_provider()

        # Must be read here: the engine wraps the set counter once we return.
        long_break_due = self._timer.is_long_break_due()

        if settings.notification_enabled:
            self.work_notice.emit({
                "session": session,
                "set_index": self._timer.set_index,
                "long_break_interval": self._timer.long_break_interval,
                "long_break_due": long_break_due,
                "fatigue_score": score,
                "fatigue_level": fatigue_level(score),
            })

        if self._alerts.check(score, self._today()):
            self.fatigue_alert.emit({"score": score, "level": fatigue_level(score)})

        if settings.auto_start_break:
            QTimer.singleShot(
                AUTO_START_DELAY_MS,
                functools.partial(self._auto_start_break, long_break_due),
            )

    def _on_break_completed(self, session: SessionRecord) -> None:
        self.record_session(session)
        settings = self._settings_provider()

        if settings.notification_enabled:
            self.break_notice.emit({"session": session})

        if settings.auto_start_work:
            QTimer.singleShot(AUTO_START_DELAY_MS, self._auto_start_work)

    def _auto_start_break(self, is_long: bool) -> None:
        # The user may already have started something from the notice.
        if self._timer.state == TimerState.IDLE:
            self._timer.start_break(is_long)

    def _auto_start_work(self) -> None:
        if self._timer.state == TimerState.IDLE:
            self._timer.start_work()
