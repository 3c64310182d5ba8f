"""
app/schemas/schedule.py

Request and response schemas for schedules and scheduler control.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.schedule import CreateScheduleRequest, UpdateScheduleRequest


class ScheduleCreateRequest(BaseModel):
    name: str
    url: str
    cron_expression: str = Field(
        ...,
        description="Six fields: second minute hour day month day_of_week",
        examples=["0 0 */6 * * *"],
    )

    def to_domain(self) -> CreateScheduleRequest:
        return CreateScheduleRequest(
            name=self.name,
            url=self.url,
            cron_expression=self.cron_expression,
        )


class ScheduleUpdateRequest(BaseModel):
    """
    Partial update; omitted or null fields are left unchanged.
    """

    name: str | None = None
    url: str | None = None
    cron_expression: str | None = None
    active: bool | None = None

    def to_domain(self) -> UpdateScheduleRequest:
        return UpdateScheduleRequest(
            name=self.name,
            url=self.url,
            cron_expression=self.cron_expression,
            active=self.active,
        )


class ScheduleResponse(BaseModel):
    id: int
    name: str
    url: str
    cron_expression: str
    active: bool
    run_count: int = Field(..., ge=0)
    last_run: datetime | None = None
    next_run: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class SchedulerStatusResponse(BaseModel):
    is_running: bool
    active_jobs: int = Field(..., ge=0)
    cron_entries: int = Field(..., ge=0)

    model_config = {"from_attributes": True}
