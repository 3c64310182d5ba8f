"""
app/repositories package marker.
"""

from app.repositories.schedule_repository import ScheduleRepository
from app.repositories.scrape_result_repository import ScrapeResultRepository

__all__ = [
    "ScheduleRepository",
    "ScrapeResultRepository",
]
