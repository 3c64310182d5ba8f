"""
app/schemas package marker.
"""

from app.schemas.schedule import (
    ScheduleCreateRequest,
    ScheduleResponse,
    SchedulerStatusResponse,
    ScheduleUpdateRequest,
)
from app.schemas.scraping import (
    HeaderResponse,
    PaginationResponse,
    ScrapeRequest,
    ScrapeResultPageResponse,
    ScrapeResultResponse,
)

__all__ = [
    "HeaderResponse",
    "PaginationResponse",
    "ScheduleCreateRequest",
    "ScheduleResponse",
    "SchedulerStatusResponse",
    "ScheduleUpdateRequest",
    "ScrapeRequest",
    "ScrapeResultPageResponse",
    "ScrapeResultResponse",
]
