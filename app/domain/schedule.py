"""
app/domain/schedule.py

Domain models for recurring scrape schedules.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Schedule:
    """
    Snapshot of one persisted schedule row.
    """

    id: int
    owner_id: int
    name: str
    url: str
    cron_expression: str
    active: bool
    run_count: int = 0
    last_run: datetime | None = None
    next_run: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class NewSchedule:
    """
    Validated schedule ready to be inserted.
    """

    owner_id: int
    name: str
    url: str
    cron_expression: str
    active: bool
    next_run: datetime | None


@dataclass(frozen=True)
class CreateScheduleRequest:
    name: str
    url: str
    cron_expression: str


@dataclass(frozen=True)
class UpdateScheduleRequest:
    """
    Partial update. ``None`` means "leave unchanged".
    """

    name: str | None = None
    url: str | None = None
    cron_expression: str | None = None
    active: bool | None = None


@dataclass(frozen=True)
class SchedulerStatus:
    is_running: bool
    active_jobs: int
    cron_entries: int
