"""Tests for fatigue alert de-duplication."""

from datetime import timedelta

import pytest

from brainsync.alerts import REALERT_DELTA, FatigueAlertPolicy
from brainsync.stats.models import AlertState

from helpers import TODAY


@pytest.fixture
def policy(storage, settings):
    return FatigueAlertPolicy(storage, lambda: settings)


class TestFatigueAlertPolicy:

    def test_below_threshold_never_alerts(self, policy, storage):
        assert policy.check(20, TODAY) is False
        assert storage.load_alert_state() == AlertState()

    def test_first_alert_of_the_day(self, policy, storage):
        assert policy.check(21, TODAY) is True
        assert storage.load_alert_state() == AlertState("2024-03-13", 21)

    def test_same_score_is_not_repeated(self, policy):
        assert policy.check(24, TODAY) is True
        assert policy.check(24, TODAY) is False

    def test_small_rise_is_suppressed(self, policy):
        policy.check(24, TODAY)
        assert policy.check(24 + REALERT_DELTA - 1, TODAY) is False

    def test_rise_of_five_alerts_again(self, policy, storage):
        policy.check(24, TODAY)
        assert policy.check(24 + REALERT_DELTA, TODAY) is True
        assert storage.load_alert_state().last_alert_score == 29

    def test_new_day_alerts_again(self, policy):
        policy.check(30, TODAY)
        assert policy.check(22, TODAY + timedelta(days=1)) is True

    def test_disabled_alerts(self, policy, settings):
        settings.fatigue_alert_enabled = False
        assert policy.check(40, TODAY) is False

    def test_notifications_off_silences_alerts(self, policy, settings):
        settings.notification_enabled = False
        assert policy.check(40, TODAY) is False

    def test_custom_threshold(self, policy, settings):
        settings.fatigue_alert_threshold = 10
        assert policy.check(10, TODAY) is True

    def test_is_over_threshold(self, policy, settings):
        assert policy.is_over_threshold(20) is False
        assert policy.is_over_threshold(21) is True
        settings.fatigue_alert_threshold = 31
        assert policy.is_over_threshold(30) is False

    def test_state_survives_new_policy(self, policy, storage, settings):
        policy.check(25, TODAY)
        fresh = FatigueAlertPolicy(storage, lambda: settings)
        assert fresh.check(26, TODAY) is False
