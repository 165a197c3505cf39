"""Tests for fatigue scoring and its individual signals."""

from datetime import timedelta

import pytest

from brainsync.stats.fatigue import (
    FATIGUE_LEVELS,
    MAX_SCORE,
    calculate_break_skip_rate,
    calculate_consecutive_days,
    calculate_interruption_rate,
    estimate_fatigue_score,
    fatigue_level,
)
from brainsync.stats.models import DailyStats, SessionKind

from helpers import NOON, TODAY, make_record, make_stats


def _score(stats):
    return estimate_fatigue_score(stats, TODAY, NOON)


# ═══════════════════════════════════════════════════════════════════════════
#  TOTAL SCORE
# ═══════════════════════════════════════════════════════════════════════════


class TestFatigueScore:

    def test_fresh_statistics_score_zero(self):
        assert _score(make_stats()) == 0

    @pytest.mark.parametrize("sessions,expected", [
        (5, 0), (6, 3), (8, 5), (10, 10), (12, 15), (20, 15),
    ])
    def test_today_session_bands(self, sessions, expected):
        assert _score(make_stats(sessions=sessions)) == expected

    @pytest.mark.parametrize("week_total,expected", [
        (29, 0), (30, 3), (40, 5), (50, 10), (60, 15),
    ])
    def test_week_session_bands(self, week_total, expected):
        stats = make_stats()
        stats.week.total_sessions = week_total
        assert _score(stats) == expected

    def test_streak_points(self):
        assert _score(make_stats(consecutive_days=4)) == 0
        assert _score(make_stats(consecutive_days=5)) == 5
        assert _score(make_stats(consecutive_days=7)) == 10

    def test_interruption_points(self):
        stats = make_stats()
        stats.today.sessions_completed = 0
        stats.today.interrupted_sessions = 3
        assert _score(stats) == 10

        stats.today.sessions_completed = 7
        assert _score(stats) == 3 + 5  # 6+ sessions, 0.3 rate

    def test_skip_points(self):
        stats = make_stats()
        stats.history = [make_record(start=NOON - timedelta(hours=h)) for h in range(1, 4)]
        assert _score(stats) == 5

    def test_score_is_clamped(self):
        stats = make_stats(sessions=12, consecutive_days=7)
        stats.today.interrupted_sessions = 12
        stats.week.total_sessions = 60
        stats.history = [make_record(start=NOON - timedelta(hours=1))]
        assert _score(stats) == MAX_SCORE

    def test_score_stays_in_range(self):
        stats = make_stats(sessions=3)
        assert 0 <= _score(stats) <= MAX_SCORE


# ═══════════════════════════════════════════════════════════════════════════
#  SIGNALS
# ═══════════════════════════════════════════════════════════════════════════


class TestInterruptionRate:

    def test_no_sessions_is_zero(self):
        assert calculate_interruption_rate(DailyStats(date="2024-03-13")) == 0.0

    def test_even_split(self):
        day = DailyStats(date="2024-03-13", sessions_completed=5, interrupted_sessions=5)
        assert calculate_interruption_rate(day) == 0.5

    def test_all_interrupted(self):
        day = DailyStats(date="2024-03-13", interrupted_sessions=2)
        assert calculate_interruption_rate(day) == 1.0


class TestConsecutiveDays:

    def test_no_activity(self):
        assert calculate_consecutive_days(make_stats(), TODAY) == 0

    def test_run_including_today(self):
        assert calculate_consecutive_days(make_stats(consecutive_days=6), TODAY) == 6

    def test_run_ending_yesterday_counts(self):
        stats = make_stats()
        for offset in range(1, 6):
            key = (TODAY - timedelta(days=offset)).isoformat()
            stats.daily_stats_history.append(DailyStats(date=key, sessions_completed=2))
        assert calculate_consecutive_days(stats, TODAY) == 5

    def test_gap_ends_the_run(self):
        stats = make_stats(consecutive_days=3)
        key = (TODAY - timedelta(days=4)).isoformat()
        stats.daily_stats_history.append(DailyStats(date=key, sessions_completed=1))
        assert calculate_consecutive_days(stats, TODAY) == 3

    def test_days_without_completed_sessions_do_not_count(self):
        stats = make_stats(sessions=1)
        key = (TODAY - timedelta(days=1)).isoformat()
        stats.daily_stats_history.append(DailyStats(date=key, interrupted_sessions=4))
        assert calculate_consecutive_days(stats, TODAY) == 1

    def test_lookback_is_bounded(self):
        assert calculate_consecutive_days(make_stats(consecutive_days=20), TODAY) == 14

    def test_history_records_count_as_activity(self):
        stats = make_stats()
        stats.history = [
            make_record(start=NOON - timedelta(days=d)) for d in range(0, 3)
        ]
        assert calculate_consecutive_days(stats, TODAY) == 3

    def test_break_records_are_not_activity(self):
        stats = make_stats()
        stats.history = [make_record(kind=SessionKind.BREAK, minutes=5)]
        assert calculate_consecutive_days(stats, TODAY) == 0


class TestBreakSkipRate:

    def test_no_work_is_zero(self):
        assert calculate_break_skip_rate([], NOON) == 0.0

    def test_expected_breaks_taken(self):
        history = [make_record(start=NOON - timedelta(hours=h)) for h in range(10)]
        history += [
            make_record(kind=SessionKind.BREAK, start=NOON - timedelta(hours=h), minutes=5)
            for h in range(9)
        ]
        assert calculate_break_skip_rate(history, NOON) == 0.0

    def test_no_breaks_taken(self):
        history = [make_record(start=NOON - timedelta(hours=h)) for h in range(4)]
        assert calculate_break_skip_rate(history, NOON) == 1.0

    def test_partial_breaks(self):
        history = [make_record(start=NOON - timedelta(hours=h)) for h in range(10)]
        history += [
            make_record(kind=SessionKind.BREAK, start=NOON - timedelta(hours=h), minutes=5)
            for h in range(4)
        ]
        assert calculate_break_skip_rate(history, NOON) == pytest.approx(1 - 4 / 9)

    def test_extra_breaks_clamp_to_zero(self):
        history = [make_record(start=NOON)]
        history += [make_record(kind=SessionKind.BREAK, minutes=5) for _ in range(3)]
        assert calculate_break_skip_rate(history, NOON) == 0.0

    def test_old_and_aborted_records_ignored(self):
        history = [
            make_record(start=NOON - timedelta(days=8)),
            make_record(completed=False),
        ]
        assert calculate_break_skip_rate(history, NOON) == 0.0


# ═══════════════════════════════════════════════════════════════════════════
#  LEVELS
# ═══════════════════════════════════════════════════════════════════════════


class TestFatigueLevel:

    @pytest.mark.parametrize("score,key", [
        (0, "good"), (10, "good"),
        (11, "caution"), (20, "caution"),
        (21, "warning"), (30, "warning"),
        (31, "danger"), (45, "danger"),
    ])
    def test_bands(self, score, key):
        assert fatigue_level(score).key == key

    def test_bands_cover_the_whole_range(self):
        assert FATIGUE_LEVELS[0].min_score == 0
        assert FATIGUE_LEVELS[-1].max_score == MAX_SCORE
        for lower, upper in zip(FATIGUE_LEVELS, FATIGUE_LEVELS[1:]):
            assert upper.min_score == lower.max_score + 1
