"""
app/domain/scraping.py

Domain models for page extraction results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Header:
    """
    One document heading (h1..h6) in document order.
    """

    level: int
    text: str


@dataclass(frozen=True)
class ScrapeResult:
    """
    Structured data extracted from one fetched page.

    Built once by the extractor and never mutated; ``id`` is assigned by the
    repository on save and returned on a new instance.
    """

    url: str
    owner_id: int
    status_code: int
    created_at: datetime
    title: str = ""
    description: str = ""
    keywords: str = ""
    author: str = ""
    language: str = ""
    favicon: str = ""
    image_url: str = ""
    site_name: str = ""
    links: tuple[str, ...] = field(default_factory=tuple)
    images: tuple[str, ...] = field(default_factory=tuple)
    headers: tuple[Header, ...] = field(default_factory=tuple)
    content_type: str = ""
    word_count: int = 0
    load_time_ms: int = 0
    id: int | None = None


@dataclass(frozen=True)
class ScrapeOptions:
    """
    Per-call fetch and extraction options.
    """

    timeout_seconds: float = 30.0
    user_agent: str = "WebScraper/1.0"
    max_redirects: int = 10
    max_links: int = 100
    max_images: int = 50
    extract_images: bool = True
    extract_favicon: bool = True
    extract_headers: bool = True
    favicon_timeout_seconds: float = 3.0
