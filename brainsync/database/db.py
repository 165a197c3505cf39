"""Database connection and session management."""

from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base

# ── paths ────────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "BrainSync"
DB_PATH = APP_SUPPORT_DIR / "brainsync.db"

# ── engine & session factory (created lazily) ─────────────────────────────

_engine: Engine | None = None
_SessionFactory = None


def _build_engine(url: str) -> Engine:
    return create_engine(url, connect_args={"check_same_thread": False}, echo=False)


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = _build_engine(f"sqlite:///{DB_PATH}")
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Point BrainSync at another SQLite URL, e.g. ``sqlite:///:memory:``.

    Drops the cached session factory so the next session binds to the new
    engine.
    """
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _SessionFactory = None
    _engine = _build_engine(url)


def init_db() -> None:
    """Create the snapshot table if it does not exist yet."""
    Base.metadata.create_all(_get_engine())


@contextmanager
def get_session():
    """Yield a session; commit on success, rollback and re-raise on error."""
    factory = _get_session_factory()
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
