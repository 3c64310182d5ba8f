"""
db/models/scrape_result.py

Scrape result model: one immutable extraction of a single page.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONDocument
from db.models.schedule import IdentifierType


class ScrapeResultRecord(Base):
    __tablename__ = "scrape_results"

    id: Mapped[int] = mapped_column(
        IdentifierType,
        primary_key=True,
        autoincrement=True,
    )
    owner_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    keywords: Mapped[str] = mapped_column(Text, nullable=False, default="")
    author: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    language: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    favicon: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    site_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    links: Mapped[list[str]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
        comment="Absolute link URLs in first-seen document order",
    )
    images: Mapped[list[str]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
        comment="Absolute image URLs in first-seen document order",
    )
    headers: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
        comment="List of {level, text} objects in document order",
    )
    status_code: Mapped[int] = mapped_column(Integer, nullable=False)
    content_type: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    load_time_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_scrape_results_owner_id", "owner_id"),
        Index("ix_scrape_results_owner_id_created_at", "owner_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ScrapeResultRecord id={self.id} url={self.url!r} status={self.status_code}>"
