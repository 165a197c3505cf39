"""Value types for session accounting.

``SessionRecord`` is immutable: one is created per finished or aborted
interval and never changed afterwards.  ``DailyStats`` for the current day
is mutated in place; archived copies in ``Statistics.daily_stats_history``
are never touched again.

Every type round-trips through plain ``dict`` payloads (``to_dict`` /
``from_dict``) so the storage layer can keep them as JSON.  ``from_dict``
raises ``ValueError`` when a required field is missing or has the wrong
type.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any

from ..timeutil import today_str


MAX_HISTORY_RECORDS = 1000
MAX_DAILY_STATS_HISTORY = 90


class SessionKind(Enum):
    WORK = "work"
    BREAK = "break"


# ── payload helpers ──────────────────────────────────────────────────────


def _require(data: Any, key: str, kind: type | tuple[type, ...]) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"expected an object, got {type(data).__name__}")
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    value = data[key]
    # bool is an int subclass
    if not isinstance(value, kind) or (isinstance(value, bool) and kind is not bool):
        raise ValueError(f"field {key!r} has wrong type {type(value).__name__}")
    return value


def _to_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} has wrong type {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"field {key!r} is not a finite number")
    return int(value)


def _required_int(data: Any, key: str) -> int:
    return _to_int(key, _require(data, key, (int, float)))


def _optional_int(data: dict, key: str, default: int = 0) -> int:
    return _to_int(key, data.get(key, default))


# ── session record ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class SessionRecord:
    """One completed or aborted work/break interval."""

    start_time: str
    end_time: str
    duration_minutes: int
    kind: SessionKind
    completed: bool
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_work(self) -> bool:
        return self.kind is SessionKind.WORK

    @property
    def day(self) -> str:
        """Calendar-day key of the start instant."""
        return self.start_time[:10]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_minutes": self.duration_minutes,
            "kind": self.kind.value,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Any) -> SessionRecord:
        try:
            kind = SessionKind(_require(data, "kind", str))
        except ValueError as exc:
            raise ValueError(f"bad session kind: {exc}") from exc
        return cls(
            id=_require(data, "id", str),
            start_time=_require(data, "start_time", str),
            end_time=_require(data, "end_time", str),
            duration_minutes=_required_int(data, "duration_minutes"),
            kind=kind,
            completed=_require(data, "completed", bool),
        )


# ── daily / weekly ───────────────────────────────────────────────────────


@dataclass
class DailyStats:
    date: str
    sessions_completed: int = 0
    total_focus_minutes: int = 0
    total_break_minutes: int = 0
    interrupted_sessions: int = 0
    fatigue_score: int = 0

    @property
    def has_activity(self) -> bool:
        return self.sessions_completed > 0 or self.interrupted_sessions > 0

    def copy(self) -> DailyStats:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "sessions_completed": self.sessions_completed,
            "total_focus_minutes": self.total_focus_minutes,
            "total_break_minutes": self.total_break_minutes,
            "interrupted_sessions": self.interrupted_sessions,
            "fatigue_score": self.fatigue_score,
        }

    @classmethod
    def from_dict(cls, data: Any) -> DailyStats:
        return cls(
            date=_require(data, "date", str),
            sessions_completed=_required_int(data, "sessions_completed"),
            total_focus_minutes=_optional_int(data, "total_focus_minutes"),
            total_break_minutes=_optional_int(data, "total_break_minutes"),
            interrupted_sessions=_optional_int(data, "interrupted_sessions"),
            fatigue_score=_optional_int(data, "fatigue_score"),
        )


@dataclass
class WeeklyStats:
    """Monday-Sunday rollup, always derived by ``recompute_week``."""

    week_start: str = ""
    week_end: str = ""
    total_sessions: int = 0
    total_focus_minutes: int = 0
    daily_average: float = 0.0
    fatigue_score: int = 0
    daily_stats: list[DailyStats] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "week_start": self.week_start,
            "week_end": self.week_end,
            "total_sessions": self.total_sessions,
            "total_focus_minutes": self.total_focus_minutes,
            "daily_average": self.daily_average,
            "fatigue_score": self.fatigue_score,
            "daily_stats": [d.to_dict() for d in self.daily_stats],
        }

    @classmethod
    def from_dict(cls, data: Any) -> WeeklyStats:
        if not isinstance(data, dict):
            return cls()
        return cls(
            week_start=str(data.get("week_start", "")),
            week_end=str(data.get("week_end", "")),
            total_sessions=_optional_int(data, "total_sessions"),
            total_focus_minutes=_optional_int(data, "total_focus_minutes"),
            daily_average=float(data.get("daily_average", 0.0)),
            fatigue_score=_optional_int(data, "fatigue_score"),
            daily_stats=[DailyStats.from_dict(d) for d in data.get("daily_stats", [])],
        )


@dataclass
class AllTimeStats:
    total_sessions: int = 0
    total_focus_minutes: int = 0
    start_date: str = ""


# ── aggregate root ───────────────────────────────────────────────────────


@dataclass
class Statistics:
    """Everything the aggregator and the scoring engine work on."""

    today: DailyStats
    week: WeeklyStats = field(default_factory=WeeklyStats)
    all_time: AllTimeStats = field(default_factory=AllTimeStats)
    history: list[SessionRecord] = field(default_factory=list)
    daily_stats_history: list[DailyStats] = field(default_factory=list)

    @classmethod
    def create(cls, today: date | None = None) -> Statistics:
        key = today_str(today)
        return cls(
            today=DailyStats(date=key),
            all_time=AllTimeStats(start_date=key),
        )

    def archived_day(self, key: str) -> DailyStats | None:
        for day in self.daily_stats_history:
            if day.date == key:
                return day
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "today": self.today.to_dict(),
            "week": self.week.to_dict(),
            "all_time": {
                "total_sessions": self.all_time.total_sessions,
                "total_focus_minutes": self.all_time.total_focus_minutes,
                "start_date": self.all_time.start_date,
            },
            "history": [r.to_dict() for r in self.history],
            "daily_stats_history": [d.to_dict() for d in self.daily_stats_history],
        }

    @classmethod
    def from_dict(cls, data: Any) -> Statistics:
        today = DailyStats.from_dict(_require(data, "today", dict))
        history = _require(data, "history", list)
        archive = _require(data, "daily_stats_history", list)
        all_time = data.get("all_time") or {}
        if not isinstance(all_time, dict):
            raise ValueError("field 'all_time' has wrong type")
        return cls(
            today=today,
            week=WeeklyStats.from_dict(data.get("week")),
            all_time=AllTimeStats(
                total_sessions=_optional_int(all_time, "total_sessions"),
                total_focus_minutes=_optional_int(all_time, "total_focus_minutes"),
                start_date=str(all_time.get("start_date") or today.date),
            ),
            history=[SessionRecord.from_dict(r) for r in history],
            daily_stats_history=[DailyStats.from_dict(d) for d in archive],
        )


@dataclass
class AlertState:
    """De-duplication state for fatigue alerts."""

    last_alert_date: str | None = None
    last_alert_score: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "last_alert_date": self.last_alert_date,
            "last_alert_score": self.last_alert_score,
        }

    @classmethod
    def from_dict(cls, data: Any) -> AlertState:
        if not isinstance(data, dict):
            raise ValueError("alert state must be an object")
        last_date = data.get("last_alert_date")
        if last_date is not None and not isinstance(last_date, str):
            raise ValueError("field 'last_alert_date' has wrong type")
        return cls(
            last_alert_date=last_date,
            last_alert_score=_optional_int(data, "last_alert_score"),
        )
