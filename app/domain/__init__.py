"""
app/domain package marker.
"""

from app.domain.pagination import Page, PaginationInfo, PaginationRequest
from app.domain.schedule import (
    CreateScheduleRequest,
    NewSchedule,
    Schedule,
    SchedulerStatus,
    UpdateScheduleRequest,
)
from app.domain.scraping import Header, ScrapeOptions, ScrapeResult

__all__ = [
    "CreateScheduleRequest",
    "Header",
    "NewSchedule",
    "Page",
    "PaginationInfo",
    "PaginationRequest",
    "Schedule",
    "SchedulerStatus",
    "ScrapeOptions",
    "ScrapeResult",
    "UpdateScheduleRequest",
]
