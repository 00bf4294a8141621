from __future__ import annotations

from datetime import UTC, datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Attempt(Base):
    """One marked practice session (a /mark-batch call)."""

    __tablename__ = "attempts"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, index=True
    )
    tier: Mapped[int] = mapped_column(Integer)
    total: Mapped[int] = mapped_column(Integer)
    correct: Mapped[int] = mapped_column(Integer)
    score: Mapped[int] = mapped_column(Integer, default=0)
    items: Mapped[list] = mapped_column(JSON)  # per-problem results
    duration_ms: Mapped[Optional[int]] = mapped_column(sa.Integer, nullable=True)


class ReviewRecord(Base):
    """A missed problem kept for resurfacing until it is mastered."""

    __tablename__ = "review_records"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    canonical_key: Mapped[str] = mapped_column(String(64), unique=True)
    tier: Mapped[int] = mapped_column(Integer, index=True)
    operands: Mapped[list] = mapped_column(JSON)
    operators: Mapped[list] = mapped_column(JSON)
    correct_answer: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    last_shown_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    times_shown: Mapped[int] = mapped_column(Integer, default=0)
    times_wrong: Mapped[int] = mapped_column(Integer, default=0)
