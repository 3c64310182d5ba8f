"""
app/api/routers/scraping.py

On-demand scraping and scrape-result endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_owner_id, to_http_exception
from app.errors import ScraperAppError
from app.schemas.scraping import (
    ScrapeRequest,
    ScrapeResultPageResponse,
    ScrapeResultResponse,
)
from app.services.scraping_service import ScrapingService, get_scraping_service

router = APIRouter(tags=["scraping"])


@router.post(
    "/scrape",
    response_model=ScrapeResultResponse,
    status_code=status.HTTP_201_CREATED,
)
def scrape_now(
    body: ScrapeRequest,
    owner_id: int = Depends(get_owner_id),
    scraping_service: ScrapingService = Depends(get_scraping_service),
) -> ScrapeResultResponse:
    """
    Fetch one page immediately and store the extracted result.
    """

    try:
        result = scraping_service.scrape_now(body.url, owner_id)
    except ScraperAppError as exc:
        raise to_http_exception(exc) from exc
    return ScrapeResultResponse.from_domain(result)


@router.get("/results", response_model=ScrapeResultPageResponse)
def list_results(
    page: int = Query(default=1, description="1-based page number"),
    per_page: int = Query(default=10, description="Page size, capped at 100"),
    owner_id: int = Depends(get_owner_id),
    scraping_service: ScrapingService = Depends(get_scraping_service),
) -> ScrapeResultPageResponse:
    try:
        result_page = scraping_service.list_results_paginated(
            owner_id, page=page, per_page=per_page
        )
    except ScraperAppError as exc:
        raise to_http_exception(exc) from exc
    return ScrapeResultPageResponse.from_domain(result_page)


@router.get("/results/{result_id}", response_model=ScrapeResultResponse)
def get_result(
    result_id: int,
    owner_id: int = Depends(get_owner_id),
    scraping_service: ScrapingService = Depends(get_scraping_service),
) -> ScrapeResultResponse:
    try:
        result = scraping_service.get_result(result_id, owner_id)
    except ScraperAppError as exc:
        raise to_http_exception(exc) from exc
    return ScrapeResultResponse.from_domain(result)


@router.delete("/results/{result_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_result(
    result_id: int,
    owner_id: int = Depends(get_owner_id),
    scraping_service: ScrapingService = Depends(get_scraping_service),
) -> None:
    try:
        scraping_service.delete_result(result_id, owner_id)
    except ScraperAppError as exc:
        raise to_http_exception(exc) from exc
