"""
app/schemas/scraping.py

Request and response schemas for scraping and stored scrape results.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.pagination import Page
from app.domain.scraping import ScrapeResult


class ScrapeRequest(BaseModel):
    url: str = Field(..., description="Absolute http(s) URL to scrape")


class HeaderResponse(BaseModel):
    level: int = Field(..., ge=1, le=6)
    text: str

    model_config = {"from_attributes": True}


class ScrapeResultResponse(BaseModel):
    """
    API response model for one stored scrape result.
    """

    id: int
    url: str
    title: str
    description: str
    keywords: str
    author: str
    language: str
    favicon: str
    image_url: str
    site_name: str
    links: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    headers: list[HeaderResponse] = Field(default_factory=list)
    status_code: int
    content_type: str
    word_count: int = Field(..., ge=0)
    load_time_ms: int = Field(..., ge=0)
    created_at: datetime

    model_config = {"from_attributes": True}

    @classmethod
    def from_domain(cls, result: ScrapeResult) -> "ScrapeResultResponse":
        return cls.model_validate(result)


class PaginationResponse(BaseModel):
    current_page: int
    per_page: int
    total_items: int
    total_pages: int
    has_next: bool
    has_prev: bool

    model_config = {"from_attributes": True}


class ScrapeResultPageResponse(BaseModel):
    items: list[ScrapeResultResponse]
    pagination: PaginationResponse

    @classmethod
    def from_domain(cls, page: Page[ScrapeResult]) -> "ScrapeResultPageResponse":
        return cls(
            items=[ScrapeResultResponse.from_domain(result) for result in page.items],
            pagination=PaginationResponse.model_validate(page.pagination),
        )
