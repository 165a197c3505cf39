"""Fatigue score estimation for BrainSync.

The score is a heuristic 0-45 integer built from five independent
signals.  Each signal contributes at most its own cap and the sum is
clamped to 45.

Signals
-------
- Sessions completed today:      >=12 +15, >=10 +10, >=8 +5, >=6 +3
- Sessions completed this week:  >=60 +15, >=50 +10, >=40 +5, >=30 +3
- Consecutive active days:       >=7 +10, >=5 +5
- Today's interruption rate:     >=0.5 +10, >=0.3 +5
- 7-day break-skip rate:         >=0.5 +5

Levels
------
    0-10   Good
    11-20  Caution
    21-30  Warning
    31-45  Danger
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ..timeutil import parse_iso, today_str
from .models import DailyStats, SessionRecord, SessionKind, Statistics


MAX_SCORE = 45
STREAK_LOOKBACK_DAYS = 14
SKIP_WINDOW_DAYS = 7
EXPECTED_BREAK_RATIO = 0.9

# Ordered descending so the first match wins.
TODAY_SESSION_POINTS: list[tuple[int, int]] = [(12, 15), (10, 10), (8, 5), (6, 3)]
WEEK_SESSION_POINTS: list[tuple[int, int]] = [(60, 15), (50, 10), (40, 5), (30, 3)]
STREAK_POINTS: list[tuple[int, int]] = [(7, 10), (5, 5)]
INTERRUPTION_POINTS: list[tuple[float, int]] = [(0.5, 10), (0.3, 5)]
SKIP_POINTS: list[tuple[float, int]] = [(0.5, 5)]


def _points(value: float, table: list[tuple[float, int]]) -> int:
    for threshold, points in table:
        if value >= threshold:
            return points
    return 0


# ── signals ──────────────────────────────────────────────────────────────


def calculate_interruption_rate(daily: DailyStats) -> float:
    """Share of today's work intervals that were abandoned."""
    total = daily.sessions_completed + daily.interrupted_sessions
    if total == 0:
        return 0.0
    return daily.interrupted_sessions / total


def calculate_consecutive_days(stats: Statistics, today: date | None = None) -> int:
    """Length of the current run of days with a completed work session.

    Active days come from the archive, from today's counters and from the
    raw session history.  The walk starts today when today already has a
    session, yesterday otherwise, and looks back at most 14 days.
    """
    today = today or date.today()
    today_key = today_str(today)

    active: set[str] = {
        day.date for day in stats.daily_stats_history if day.sessions_completed > 0
    }
    if stats.today.date == today_key and stats.today.sessions_completed > 0:
        active.add(today_key)
    for record in stats.history:
        if record.kind is SessionKind.WORK and record.completed:
            active.add(record.day)

    cursor = today if today_key in active else today - timedelta(days=1)
    run = 0
    for _ in range(STREAK_LOOKBACK_DAYS):
        if cursor.isoformat() not in active:
            break
        run += 1
        cursor -= timedelta(days=1)
    return run


def calculate_break_skip_rate(
    history: list[SessionRecord], now: datetime | None = None,
) -> float:
    """Shortfall of breaks taken against 0.9 breaks per work session.

    Only completed records that started in the trailing seven days count.
    0.0 means every expected break was taken, 1.0 means none were.
    """
    now = now or datetime.now().astimezone()
    if now.tzinfo is None:
        now = now.astimezone()
    cutoff = now - timedelta(days=SKIP_WINDOW_DAYS)

    work = 0
    breaks = 0
    for record in history:
        if not record.completed:
            continue
        try:
            started = parse_iso(record.start_time)
        except ValueError:
            continue
        if started < cutoff:
            continue
        if record.kind is SessionKind.WORK:
            work += 1
        else:
            breaks += 1

    if work == 0:
        return 0.0
    actual_rate = breaks / (work * EXPECTED_BREAK_RATIO)
    return max(0.0, min(1.0, 1.0 - actual_rate))


# ── score ────────────────────────────────────────────────────────────────


def estimate_fatigue_score(
    stats: Statistics,
    today: date | None = None,
    now: datetime | None = None,
) -> int:
    """Sum the weighted signals for *stats*; always within ``[0, 45]``."""
    score = 0
    score += _points(stats.today.sessions_completed, TODAY_SESSION_POINTS)
    score += _points(stats.week.total_sessions, WEEK_SESSION_POINTS)
    score += _points(calculate_consecutive_days(stats, today), STREAK_POINTS)
    score += _points(calculate_interruption_rate(stats.today), INTERRUPTION_POINTS)
    score += _points(calculate_break_skip_rate(stats.history, now), SKIP_POINTS)
    return max(0, min(score, MAX_SCORE))


# ── levels ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FatigueLevel:
    key: str
    label: str
    min_score: int
    max_score: int


FATIGUE_LEVELS: tuple[FatigueLevel, ...] = (
    FatigueLevel("good", "Good", 0, 10),
    FatigueLevel("caution", "Caution", 11, 20),
    FatigueLevel("warning", "Warning", 21, 30),
    FatigueLevel("danger", "Danger", 31, MAX_SCORE),
)


def fatigue_level(score: int) -> FatigueLevel:
    """Band for *score*; anything above 30 is Danger."""
    for level in FATIGUE_LEVELS:
        if score <= level.max_score:
            return level
    return FATIGUE_LEVELS[-1]
