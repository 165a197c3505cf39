"""SQLAlchemy ORM models for BrainSync."""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Snapshot(Base):
    """One persisted document per data kind (timer, statistics, alert).

    Writes replace the whole payload; there is never more than one row
    per ``kind``.
    """

    __tablename__ = "snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(64), nullable=False, unique=True)
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def __repr__(self) -> str:
        return f"<Snapshot kind={self.kind} updated_at={self.updated_at}>"
