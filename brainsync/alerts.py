"""Fatigue alert de-duplication.

An alert is raised at most once per day unless the score keeps climbing:
a second alert on the same day needs the score to have risen by at least
``REALERT_DELTA`` points since the last one.
"""

from __future__ import annotations

from datetime import date

from .settings import SettingsProvider, load_settings
from .stats.models import AlertState
from .timeutil import today_str


REALERT_DELTA = 5


class FatigueAlertPolicy:
    """Decides whether a fatigue score warrants an alert, and remembers it."""

    def __init__(self, storage, settings: SettingsProvider = load_settings) -> None:
        self._storage = storage
        self._settings_provider = settings

    def is_over_threshold(self, score: int) -> bool:
        """Whether *score* should light the status indicator's warning."""
        return score >= self._settings_provider().fatigue_alert_threshold

    def check(self, score: int, today: date | None = None) -> bool:
        """Return True if an alert should be shown for *score* now.

        A positive answer is recorded immediately so the same alert is not
        repeated by the next completed session.
        """
        settings = self._settings_provider()
        if not settings.fatigue_alert_enabled or not settings.notification_enabled:
            return False
        if score < settings.fatigue_alert_threshold:
            return False

        key = today_str(today)
        state = self._storage.load_alert_state()
        if state.last_alert_date == key and score - state.last_alert_score < REALERT_DELTA:
            return False

        self._storage.save_alert_state(AlertState(last_alert_date=key, last_alert_score=score))
        return True
