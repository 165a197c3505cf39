"""Rolling daily/weekly aggregates built from session records.

``record_session`` is the only writer of the aggregate; ``recompute_week``
and ``export_rows`` are read-mostly views.  All three accept an optional
*today* so tests can pin the calendar.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from ..timeutil import round_half_up, today_str, week_days, week_end, week_start
from .fatigue import estimate_fatigue_score
from .models import (
    MAX_DAILY_STATS_HISTORY,
    MAX_HISTORY_RECORDS,
    DailyStats,
    SessionKind,
    SessionRecord,
    Statistics,
    WeeklyStats,
)


EXPORT_RANGES = ("week", "month", "all")
EXPORT_MONTH_DAYS = 30

CSV_HEADERS = (
    "Date",
    "Sessions",
    "Focus Time (min)",
    "Break Time (min)",
    "Interrupted",
    "Fatigue Score",
)


def roll_over(stats: Statistics, today: date | None = None) -> bool:
    """Archive ``stats.today`` if the calendar moved on.

    Returns True when a rollover happened.  The outgoing day is archived
    only if it saw any work (completed or interrupted).
    """
    key = today_str(today)
    if stats.today.date == key:
        return False
    if stats.today.date and stats.today.has_activity:
        stats.daily_stats_history.append(stats.today.copy())
        if len(stats.daily_stats_history) > MAX_DAILY_STATS_HISTORY:
            del stats.daily_stats_history[: len(stats.daily_stats_history) - MAX_DAILY_STATS_HISTORY]
    stats.today = DailyStats(date=key)
    return True


def record_session(
    stats: Statistics,
    session: SessionRecord,
    today: date | None = None,
    now: datetime | None = None,
) -> Statistics:
    """Fold one finished or aborted interval into *stats* (in place)."""
    roll_over(stats, today)

    if session.kind is SessionKind.WORK:
        if session.completed:
            stats.today.sessions_completed += 1
            stats.today.total_focus_minutes += session.duration_minutes
            stats.all_time.total_sessions += 1
            stats.all_time.total_focus_minutes += session.duration_minutes
        else:
            stats.today.interrupted_sessions += 1
    elif session.completed:
        stats.today.total_break_minutes += session.duration_minutes

    stats.history.append(session)
    if len(stats.history) > MAX_HISTORY_RECORDS:
        del stats.history[: len(stats.history) - MAX_HISTORY_RECORDS]

    stats.today.fatigue_score = estimate_fatigue_score(stats, today, now)
    return stats


def recompute_week(
    stats: Statistics, today: date | None = None, now: datetime | None = None,
) -> Statistics:
    """Rebuild ``stats.week`` for the Monday-Sunday week containing *today*."""
    today = today or date.today()

    days: list[DailyStats] = []
    for day in week_days(today):
        key = day.isoformat()
        if key == stats.today.date:
            days.append(stats.today)
        else:
            days.append(stats.archived_day(key) or DailyStats(date=key))

    total_sessions = sum(d.sessions_completed for d in days)
    stats.week = WeeklyStats(
        week_start=week_start(today).isoformat(),
        week_end=week_end(today).isoformat(),
        total_sessions=total_sessions,
        total_focus_minutes=sum(d.total_focus_minutes for d in days),
        daily_average=round_half_up(total_sessions / 7, 1),
        daily_stats=days,
    )
    stats.week.fatigue_score = estimate_fatigue_score(stats, today, now)
    return stats


def export_rows(
    stats: Statistics, range_: str = "all", today: date | None = None,
) -> list[DailyStats]:
    """Daily rows for ``week``, ``month`` (trailing 30 days) or ``all``."""
    if range_ not in EXPORT_RANGES:
        raise ValueError(f"unknown export range {range_!r}, expected one of {EXPORT_RANGES}")

    if range_ == "week":
        return list(stats.week.daily_stats)

    archive = stats.daily_stats_history
    if range_ == "month":
        cutoff = ((today or date.today()) - timedelta(days=EXPORT_MONTH_DAYS)).isoformat()
        archive = [d for d in archive if d.date >= cutoff]
    return sorted([*archive, stats.today], key=lambda d: d.date)


def format_csv(rows: list[DailyStats]) -> str:
    """Comma-separated table with a header row, no trailing newline."""
    lines = [",".join(CSV_HEADERS)]
    for day in rows:
        lines.append(",".join(str(v) for v in (
            day.date,
            day.sessions_completed,
            day.total_focus_minutes,
            day.total_break_minutes,
            day.interrupted_sessions,
            day.fatigue_score,
        )))
    return "\n".join(lines)
