"""
app/services package marker.
"""

from app.services.scraping_service import (
    ScrapingService,
    get_page_extractor,
    get_scrape_result_repository,
    get_scraping_service,
)

__all__ = [
    "ScrapingService",
    "get_page_extractor",
    "get_scrape_result_repository",
    "get_scraping_service",
]
