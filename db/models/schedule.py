"""
db/models/schedule.py

Schedule model: one recurring scrape definition owned by a user.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
IdentifierType = BigInteger().with_variant(Integer(), "sqlite")


class ScheduleRecord(Base, TimestampMixin):
    """
    Persisted schedule row.

    last_run, next_run and run_count are written by the trigger handler after
    each fire; the remaining fields are written by the orchestrator.
    """

    __tablename__ = "schedules"

    id: Mapped[int] = mapped_column(
        IdentifierType,
        primary_key=True,
        autoincrement=True,
    )
    owner_id: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    cron_expression: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Six fields: second minute hour day month day_of_week",
    )
    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    last_run: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    next_run: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    run_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    __table_args__ = (
        Index("ix_schedules_owner_id", "owner_id"),
        Index("ix_schedules_active", "active"),
    )

    def __repr__(self) -> str:
        return f"<ScheduleRecord id={self.id} name={self.name!r} cron={self.cron_expression!r}>"
