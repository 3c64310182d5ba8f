"""
app/api/routers package marker.
"""

from app.api.routers.schedules import router as schedule_router
from app.api.routers.schedules import scheduler_router
from app.api.routers.scraping import router as scraping_router

__all__ = [
    "schedule_router",
    "scheduler_router",
    "scraping_router",
]
