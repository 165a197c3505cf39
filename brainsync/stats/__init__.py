"""Statistics package."""

from .models import (
    SessionKind,
    SessionRecord,
    DailyStats,
    WeeklyStats,
    AllTimeStats,
    Statistics,
    AlertState,
    MAX_HISTORY_RECORDS,
    MAX_DAILY_STATS_HISTORY,
)
from .fatigue import (
    estimate_fatigue_score,
    calculate_consecutive_days,
    calculate_interruption_rate,
    calculate_break_skip_rate,
    fatigue_level,
    FatigueLevel,
    FATIGUE_LEVELS,
)
from .aggregator import (
    record_session,
    recompute_week,
    export_rows,
    format_csv,
    EXPORT_RANGES,
)

__all__ = [
    "SessionKind",
    "SessionRecord",
    "DailyStats",
    "WeeklyStats",
    "AllTimeStats",
    "Statistics",
    "AlertState",
    "MAX_HISTORY_RECORDS",
    "MAX_DAILY_STATS_HISTORY",
    "estimate_fatigue_score",
    "calculate_consecutive_days",
    "calculate_interruption_rate",
    "calculate_break_skip_rate",
    "fatigue_level",
    "FatigueLevel",
    "FATIGUE_LEVELS",
    "record_session",
    "recompute_week",
    "export_rows",
    "format_csv",
    "EXPORT_RANGES",
]
