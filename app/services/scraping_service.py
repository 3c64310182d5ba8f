"""
app/services/scraping_service.py

On-demand scraping and access to stored scrape results.
"""

from __future__ import annotations

from functools import lru_cache

from app.config import get_scraping_settings
from app.domain.pagination import Page, PaginationInfo, PaginationRequest
from app.domain.scraping import ScrapeResult
from app.errors import NotFoundError
from app.repositories.scrape_result_repository import ScrapeResultRepository
from app.scraping.extractor import PageExtractor
from app.validators.request_validator import validate_url


class ScrapingService:
    """
    Validates input, runs the extractor and enforces result ownership.
    """

    def __init__(
        self,
        *,
        extractor: PageExtractor,
        repository: ScrapeResultRepository,
    ) -> None:
        self._extractor = extractor
        self._repository = repository

    def scrape_now(self, url: str, owner_id: int) -> ScrapeResult:
        return self._extractor.extract(validate_url(url), owner_id)

    def get_result(self, result_id: int, owner_id: int) -> ScrapeResult:
        result = self._repository.find_by_id(result_id)
        if result is None or result.owner_id != owner_id:
            raise NotFoundError("scrape result")
        return result

    def list_results(self, owner_id: int) -> list[ScrapeResult]:
        return self._repository.find_by_owner(owner_id)

    def list_results_paginated(
        self,
        owner_id: int,
        *,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Page[ScrapeResult]:
        request = PaginationRequest.create(page, per_page)
        items, total = self._repository.find_by_owner_paginated(owner_id, request)
        return Page(items=items, pagination=PaginationInfo.build(request, total))

    def delete_result(self, result_id: int, owner_id: int) -> None:
        self.get_result(result_id, owner_id)
        if not self._repository.delete(result_id):
            raise NotFoundError("scrape result")


@lru_cache(maxsize=1)
def get_scrape_result_repository() -> ScrapeResultRepository:
    return ScrapeResultRepository()


@lru_cache(maxsize=1)
def get_page_extractor() -> PageExtractor:
    """
    Build and cache the extractor configured from environment settings.
    """

    return PageExtractor(
        repository=get_scrape_result_repository(),
        options=get_scraping_settings().to_options(),
    )


@lru_cache(maxsize=1)
def get_scraping_service() -> ScrapingService:
    """
    Build and cache scraping service.
    """

    return ScrapingService(
        extractor=get_page_extractor(),
        repository=get_scrape_result_repository(),
    )
