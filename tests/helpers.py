"""Shared test helpers for BrainSync."""

from datetime import date, datetime, timedelta

from brainsync.stats.models import DailyStats, SessionKind, SessionRecord, Statistics
from brainsync.timer.engine import TimerEngine


# Wednesday, so a whole Monday-Sunday week surrounds it.
TODAY = date(2024, 3, 13)
NOON = datetime(2024, 3, 13, 12, 0).astimezone()


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Wall clock under test control (epoch seconds)."""

    def __init__(self, start: datetime | None = None):
        self.now = (start or datetime(2024, 3, 13, 10, 0)).timestamp()

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def complete_session(engine: TimerEngine, clock: FakeClock) -> None:
    """Jump the clock past the end of the current interval and tick."""
    clock.advance(engine.remaining + 1)
    engine._on_tick()


def make_record(
    kind: SessionKind = SessionKind.WORK,
    completed: bool = True,
    start: datetime = NOON,
    minutes: int = 25,
) -> SessionRecord:
    start = start.astimezone()
    return SessionRecord(
        start_time=start.isoformat(),
        end_time=(start + timedelta(minutes=minutes)).isoformat(),
        duration_minutes=minutes,
        kind=kind,
        completed=completed,
    )


def make_stats(
    today: date = TODAY,
    sessions: int | None = None,
    consecutive_days: int | None = None,
) -> Statistics:
    """Statistics with *sessions* today and/or a run of active days."""
    stats = Statistics.create(today)
    if sessions is not None:
        stats.today.sessions_completed = sessions
    if consecutive_days is not None:
        for offset in range(consecutive_days - 1, -1, -1):
            key = (today - timedelta(days=offset)).isoformat()
            if offset == 0:
                stats.today.sessions_completed = max(stats.today.sessions_completed, 1)
            else:
                stats.daily_stats_history.append(DailyStats(date=key, sessions_completed=1))
    return stats
