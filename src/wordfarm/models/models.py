"""Database models for the word farm."""
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    DateTime,
    String,
    Text,
)

from wordfarm.models.base import Base

WORD_DB_RECORD = "word_db"
FARM_STATE_RECORD = "farm_state"


class TimestampMixin:
    """Mixin for adding created_at and updated_at timestamps."""

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


class ProgressRecord(Base, TimestampMixin):
    """Named JSON snapshot of learner progress."""

    __tablename__ = "progress_records"

    name = Column(String, primary_key=True)  # word_db or farm_state
    payload = Column(Text, nullable=False)
