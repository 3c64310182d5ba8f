"""
app/api/routers/schedules.py

Schedule CRUD and scheduler control endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_owner_id, to_http_exception
from app.errors import ScraperAppError
from app.scheduler.orchestrator import ScheduleOrchestrator, get_schedule_orchestrator
from app.schemas.schedule import (
    ScheduleCreateRequest,
    ScheduleResponse,
    SchedulerStatusResponse,
    ScheduleUpdateRequest,
)

router = APIRouter(prefix="/schedules", tags=["schedules"])
scheduler_router = APIRouter(prefix="/scheduler", tags=["scheduler"])


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
def create_schedule(
    body: ScheduleCreateRequest,
    owner_id: int = Depends(get_owner_id),
    orchestrator: ScheduleOrchestrator = Depends(get_schedule_orchestrator),
) -> ScheduleResponse:
    """
    Create a schedule; it is registered immediately when the scheduler runs.
    """

    try:
        schedule = orchestrator.create_schedule(body.to_domain(), owner_id)
    except ScraperAppError as exc:
        raise to_http_exception(exc) from exc
    return ScheduleResponse.model_validate(schedule)


@router.get("", response_model=list[ScheduleResponse])
def list_schedules(
    owner_id: int = Depends(get_owner_id),
    orchestrator: ScheduleOrchestrator = Depends(get_schedule_orchestrator),
) -> list[ScheduleResponse]:
    try:
        schedules = orchestrator.list_schedules(owner_id)
    except ScraperAppError as exc:
        raise to_http_exception(exc) from exc
    return [ScheduleResponse.model_validate(schedule) for schedule in schedules]


@router.get("/{schedule_id}", response_model=ScheduleResponse)
def get_schedule(
    schedule_id: int,
    owner_id: int = Depends(get_owner_id),
    orchestrator: ScheduleOrchestrator = Depends(get_schedule_orchestrator),
) -> ScheduleResponse:
    try:
        schedule = orchestrator.get_schedule(schedule_id, owner_id)
    except ScraperAppError as exc:
        raise to_http_exception(exc) from exc
    return ScheduleResponse.model_validate(schedule)


@router.patch("/{schedule_id}", response_model=ScheduleResponse)
def update_schedule(
    schedule_id: int,
    body: ScheduleUpdateRequest,
    owner_id: int = Depends(get_owner_id),
    orchestrator: ScheduleOrchestrator = Depends(get_schedule_orchestrator),
) -> ScheduleResponse:
    try:
        schedule = orchestrator.update_schedule(schedule_id, body.to_domain(), owner_id)
    except ScraperAppError as exc:
        raise to_http_exception(exc) from exc
    return ScheduleResponse.model_validate(schedule)


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    schedule_id: int,
    owner_id: int = Depends(get_owner_id),
    orchestrator: ScheduleOrchestrator = Depends(get_schedule_orchestrator),
) -> None:
    try:
        orchestrator.delete_schedule(schedule_id, owner_id)
    except ScraperAppError as exc:
        raise to_http_exception(exc) from exc


# ---------------------------------------------------------------------------
# Scheduler control
# ---------------------------------------------------------------------------


@scheduler_router.get("/status", response_model=SchedulerStatusResponse)
def scheduler_status(
    orchestrator: ScheduleOrchestrator = Depends(get_schedule_orchestrator),
) -> SchedulerStatusResponse:
    return SchedulerStatusResponse.model_validate(orchestrator.get_status())


@scheduler_router.post("/start", response_model=SchedulerStatusResponse)
def start_scheduler(
    orchestrator: ScheduleOrchestrator = Depends(get_schedule_orchestrator),
) -> SchedulerStatusResponse:
    orchestrator.start()
    return SchedulerStatusResponse.model_validate(orchestrator.get_status())


@scheduler_router.post("/stop", response_model=SchedulerStatusResponse)
def stop_scheduler(
    orchestrator: ScheduleOrchestrator = Depends(get_schedule_orchestrator),
) -> SchedulerStatusResponse:
    orchestrator.stop()
    return SchedulerStatusResponse.model_validate(orchestrator.get_status())
