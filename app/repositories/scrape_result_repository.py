"""
app/repositories/scrape_result_repository.py

Persistence layer for extracted page results.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from sqlalchemy import delete, func, select

from app.domain.pagination import PaginationRequest
from app.domain.scraping import Header, ScrapeResult
from app.repositories.base import SessionScopedRepository, as_utc
from db.models.scrape_result import ScrapeResultRecord


def _headers_to_json(headers: tuple[Header, ...]) -> list[dict[str, Any]]:
    return [{"level": header.level, "text": header.text} for header in headers]


def _to_domain(record: ScrapeResultRecord) -> ScrapeResult:
    return ScrapeResult(
        id=record.id,
        url=record.url,
        owner_id=record.owner_id,
        status_code=record.status_code,
        created_at=as_utc(record.created_at),
        title=record.title,
        description=record.description,
        keywords=record.keywords,
        author=record.author,
        language=record.language,
        favicon=record.favicon,
        image_url=record.image_url,
        site_name=record.site_name,
        links=tuple(record.links or ()),
        images=tuple(record.images or ()),
        headers=tuple(
            Header(level=int(item["level"]), text=str(item["text"]))
            for item in (record.headers or ())
        ),
        content_type=record.content_type,
        word_count=record.word_count,
        load_time_ms=record.load_time_ms,
    )


class ScrapeResultRepository(SessionScopedRepository):
    """
    Repository for the ``scrape_results`` table.
    """

    def save(self, result: ScrapeResult) -> ScrapeResult:
        with self._scope("save scraping result") as session:
            record = ScrapeResultRecord(
                owner_id=result.owner_id,
                url=result.url,
                title=result.title,
                description=result.description,
                keywords=result.keywords,
                author=result.author,
                language=result.language,
                favicon=result.favicon,
                image_url=result.image_url,
                site_name=result.site_name,
                links=list(result.links),
                images=list(result.images),
                headers=_headers_to_json(result.headers),
                status_code=result.status_code,
                content_type=result.content_type,
                word_count=result.word_count,
                load_time_ms=result.load_time_ms,
                created_at=result.created_at,
            )
            session.add(record)
            session.flush()
            return replace(result, id=record.id)

    def find_by_id(self, result_id: int) -> ScrapeResult | None:
        with self._scope("get result") as session:
            record = session.get(ScrapeResultRecord, result_id)
            return _to_domain(record) if record is not None else None

    def find_by_owner(self, owner_id: int) -> list[ScrapeResult]:
        stmt = (
            select(ScrapeResultRecord)
            .where(ScrapeResultRecord.owner_id == owner_id)
            .order_by(ScrapeResultRecord.created_at.desc(), ScrapeResultRecord.id.desc())
        )
        with self._scope("get all results") as session:
            return [_to_domain(record) for record in session.scalars(stmt).all()]

    def find_by_owner_paginated(
        self,
        owner_id: int,
        pagination: PaginationRequest,
    ) -> tuple[list[ScrapeResult], int]:
        count_stmt = (
            select(func.count())
            .select_from(ScrapeResultRecord)
            .where(ScrapeResultRecord.owner_id == owner_id)
        )
        page_stmt = (
            select(ScrapeResultRecord)
            .where(ScrapeResultRecord.owner_id == owner_id)
            .order_by(ScrapeResultRecord.created_at.desc(), ScrapeResultRecord.id.desc())
            .offset(pagination.offset)
            .limit(pagination.per_page)
        )
        with self._scope("get paginated results") as session:
            total = int(session.scalar(count_stmt) or 0)
            rows = [_to_domain(record) for record in session.scalars(page_stmt).all()]
            return rows, total

    def delete(self, result_id: int) -> bool:
        with self._scope("delete result") as session:
            result = session.execute(
                delete(ScrapeResultRecord).where(ScrapeResultRecord.id == result_id)
            )
            return bool(result.rowcount)
