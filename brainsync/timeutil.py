"""Date and time helpers shared by the timer and the statistics code.

All calendar-day keys are ``YYYY-MM-DD`` strings in local time.  Session
instants are ISO-8601 strings carrying the local UTC offset, so the first
ten characters of a session's ``start_time`` are always its day key.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta


def today_str(today: date | None = None) -> str:
    """Day key for *today* (defaults to the local calendar date)."""
    return (today or date.today()).isoformat()


def week_start(day: date) -> date:
    """Monday of the ISO week containing *day*."""
    return day - timedelta(days=day.weekday())


def week_end(day: date) -> date:
    """Sunday of the ISO week containing *day*."""
    return week_start(day) + timedelta(days=6)


def week_days(day: date) -> list[date]:
    """The seven dates, Monday first, of the week containing *day*."""
    start = week_start(day)
    return [start + timedelta(days=i) for i in range(7)]


# ── instants ─────────────────────────────────────────────────────────────


def epoch_ms(seconds: float) -> int:
    """Epoch seconds → integer epoch milliseconds."""
    return int(round(seconds * 1000))


def iso_from_epoch(seconds: float) -> str:
    """Epoch seconds → local ISO-8601 string with offset (ms precision)."""
    return (
        datetime.fromtimestamp(seconds)
        .astimezone()
        .isoformat(timespec="milliseconds")
    )


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 instant into an aware datetime.

    Naive values are taken to be local time; a trailing ``Z`` is accepted.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


# ── rounding / formatting ────────────────────────────────────────────────


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves upward, the way ``round()`` does not (it rounds to even)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def seconds_to_minutes(seconds: float) -> int:
    """Whole minutes in *seconds*, halves rounded up."""
    return int(round_half_up(max(0.0, seconds) / 60))


def format_time(seconds: float) -> str:
    """Countdown display: 1500 → '25:00', 61.7 → '1:01'."""
    total = int(max(0, seconds))
    mins, secs = divmod(total, 60)
    return f"{mins}:{secs:02d}"


def format_minutes(total_minutes: int) -> str:
    """125 → '2h 5m', 45 → '45m', 120 → '2h'."""
    if total_minutes <= 0:
        return "0m"
    hours, mins = divmod(total_minutes, 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"
