"""Snapshot storage on top of the SQLAlchemy session helpers.

Each data kind (timer, statistics, alert state) is one JSON document that
is replaced whole on every write.  Reads never raise: a missing row or a
payload that fails validation yields the kind's defaults.  Write failures
are logged and swallowed; the caller's in-memory state stays
authoritative.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..stats.models import AlertState, Statistics
from ..timer.state import TimerSnapshot
from .db import get_session
from .models import Snapshot


logger = logging.getLogger(__name__)


class SnapshotKind(Enum):
    TIMER = "brainsync.timerData"
    STATISTICS = "brainsync.statistics"
    ALERT = "brainsync.alertState"


class Storage:
    """Key-value store for the three snapshot kinds."""

    # ── raw access ────────────────────────────────────────────────────

    def get(self, kind: SnapshotKind) -> Any | None:
        """Stored payload for *kind*, or ``None`` if absent or unreadable."""
        try:
            with get_session() as db:
                row = db.query(Snapshot).filter_by(kind=kind.value).first()
                return row.payload if row is not None else None
        except SQLAlchemyError:
            logger.exception("Failed to read %s", kind.value)
            return None
        except ValueError as exc:
            # the JSON column decodes on fetch
            logger.warning("Discarding undecodable %s: %s", kind.value, exc)
            return None

    def set(self, kind: SnapshotKind, payload: Any) -> None:
        """Replace the stored payload for *kind*."""
        try:
            with get_session() as db:
                # Bulk update so an undecodable old payload is never loaded.
                updated = (
                    db.query(Snapshot)
                    .filter_by(kind=kind.value)
                    .update(
                        {Snapshot.payload: payload, Snapshot.updated_at: datetime.now()},
                        synchronize_session=False,
                    )
                )
                if not updated:
                    db.add(Snapshot(kind=kind.value, payload=payload))
        except SQLAlchemyError:
            logger.exception("Failed to save %s", kind.value)

    def delete(self, kind: SnapshotKind) -> None:
        try:
            with get_session() as db:
                db.query(Snapshot).filter_by(kind=kind.value).delete()
        except SQLAlchemyError:
            logger.exception("Failed to delete %s", kind.value)

    # ── typed helpers ─────────────────────────────────────────────────

    def _load(self, kind: SnapshotKind, factory):
        payload = self.get(kind)
        if payload is None:
            return None
        try:
            return factory(payload)
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning("Discarding malformed %s: %s", kind.value, exc)
            return None

    def load_timer(self) -> TimerSnapshot:
        return self._load(SnapshotKind.TIMER, TimerSnapshot.from_dict) or TimerSnapshot.idle()

    def save_timer(self, snapshot: TimerSnapshot) -> None:
        self.set(SnapshotKind.TIMER, snapshot.to_dict())

    def load_statistics(self, today: date | None = None) -> Statistics:
        stats = self._load(SnapshotKind.STATISTICS, Statistics.from_dict)
        return stats if stats is not None else Statistics.create(today)

    def save_statistics(self, stats: Statistics) -> None:
        self.set(SnapshotKind.STATISTICS, stats.to_dict())

    def load_alert_state(self) -> AlertState:
        return self._load(SnapshotKind.ALERT, AlertState.from_dict) or AlertState()

    def save_alert_state(self, state: AlertState) -> None:
        self.set(SnapshotKind.ALERT, state.to_dict())

    # ── reset ─────────────────────────────────────────────────────────

    def reset_statistics(self) -> None:
        """Forget statistics and alert history; the timer is untouched."""
        self.delete(SnapshotKind.STATISTICS)
        self.delete(SnapshotKind.ALERT)
