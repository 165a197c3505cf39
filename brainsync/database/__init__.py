"""Database package."""

from .db import get_session, init_db, configure_engine
from .models import Snapshot
from .storage import Storage, SnapshotKind

__all__ = ["get_session", "init_db", "configure_engine", "Snapshot", "Storage", "SnapshotKind"]
