"""
app/scheduler/orchestrator.py

Owns the schedule lifecycle: CRUD with ownership checks, and the mapping from
stored schedules to jobs on the APScheduler cron driver.

Lifecycle
----------
``start()`` loads every active schedule and registers one cron job per row,
then starts the driver. ``stop()`` halts the driver without waiting for
in-flight runs and clears the registry; a later ``start()`` reloads from the
database. CRUD calls keep the registry in step with the stored rows while the
driver is running.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from functools import lru_cache

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

from app.config import SchedulerSettings, get_scheduler_settings
from app.domain.schedule import (
    CreateScheduleRequest,
    NewSchedule,
    Schedule,
    SchedulerStatus,
    UpdateScheduleRequest,
)
from app.errors import NotFoundError, PersistenceError
from app.logging_utils import log_event
from app.repositories.schedule_repository import ScheduleRepository
from app.scheduler.cron import CronExpressionError, calculate_next_run, parse_cron_expression
from app.scheduler.trigger import ScheduleTriggerHandler
from app.scraping.extractor import PageExtractor
from app.services.scraping_service import get_page_extractor
from app.validators.request_validator import (
    validate_cron_expression,
    validate_name,
    validate_url,
)

logger = logging.getLogger(__name__)


def job_id_for(schedule_id: int, registration: int) -> str:
    return f"schedule-{schedule_id}-{registration}"


class ScheduleOrchestrator:
    """
    Thread-safe schedule manager.

    ``_lock`` guards ``_running``, ``_registry`` and the scheduler instance.
    The registry holds at most one job per schedule ID; every registration
    gets its own job ID so a handler can only ever remove its own job.
    """

    def __init__(
        self,
        *,
        repository: ScheduleRepository,
        extractor: PageExtractor,
        settings: SchedulerSettings | None = None,
    ) -> None:
        self._repository = repository
        self._extractor = extractor
        self._settings = settings or SchedulerSettings()
        # One exclusive lock for reads and writes; every critical section is
        # in-memory apart from the row write in update and delete.
        self._lock = threading.RLock()
        self._registrations = itertools.count(1)
        self._running = False
        self._registry: dict[int, str] = {}
        self._scheduler = self._build_scheduler()

    def _build_scheduler(self) -> BackgroundScheduler:
        return BackgroundScheduler(
            timezone=self._settings.timezone,
            executors={"default": ThreadPoolExecutor(self._settings.max_workers)},
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": self._settings.misfire_grace_seconds,
            },
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                logger.warning("Scheduler is already running")
                return

            try:
                schedules = self._repository.find_all_active()
            except PersistenceError as exc:
                # Start with an empty registry; later creates still register.
                logger.error("Failed to load active schedules: %s", exc)
                schedules = []

            loaded = sum(1 for schedule in schedules if self._try_register_locked(schedule))
            self._scheduler.start()
            self._running = True

        log_event(
            logger,
            logging.INFO,
            "scheduler_started",
            active_schedules=len(schedules),
            registered=loaded,
        )

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                logger.warning("Scheduler is not running")
                return
            # In-flight runs finish on their own; no new fires after this.
            self._scheduler.shutdown(wait=False)
            self._registry.clear()
            self._scheduler = self._build_scheduler()
            self._running = False
        log_event(logger, logging.INFO, "scheduler_stopped")

    def get_status(self) -> SchedulerStatus:
        with self._lock:
            return SchedulerStatus(
                is_running=self._running,
                active_jobs=len(self._registry),
                cron_entries=len(self._scheduler.get_jobs()),
            )

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register(self, schedule: Schedule) -> bool:
        """
        Add a cron job for ``schedule``. Registering an already registered ID
        is a no-op. Returns True when a new job was added.
        """

        with self._lock:
            return self._register_locked(schedule)

    def deregister(self, schedule_id: int) -> bool:
        """
        Remove the cron job for ``schedule_id``. Returns False if none existed.
        """

        with self._lock:
            return self._deregister_locked(schedule_id)

    def deregister_if_current(self, schedule_id: int, job_id: str) -> bool:
        """
        Remove the cron job for ``schedule_id`` only while ``job_id`` is still
        the registered one. A handler left over from an earlier registration
        therefore never removes its replacement.
        """

        with self._lock:
            if self._registry.get(schedule_id) != job_id:
                logger.debug(
                    "Job %s is no longer current for schedule %d, leaving registry as is",
                    job_id,
                    schedule_id,
                )
                return False
            return self._deregister_locked(schedule_id)

    def registered_schedule_ids(self) -> set[int]:
        with self._lock:
            return set(self._registry)

    def registered_job_id(self, schedule_id: int) -> str | None:
        with self._lock:
            return self._registry.get(schedule_id)

    def _self_heal_callback(self, job_id: str) -> Callable[[int], bool]:
        def deregister(schedule_id: int) -> bool:
            return self.deregister_if_current(schedule_id, job_id)

        return deregister

    def _register_locked(self, schedule: Schedule) -> bool:
        if schedule.id in self._registry:
            logger.debug("Job already registered for schedule %d, skipping", schedule.id)
            return False

        trigger = parse_cron_expression(schedule.cron_expression, tz=self._settings.timezone)
        job_id = job_id_for(schedule.id, next(self._registrations))
        handler = ScheduleTriggerHandler(
            schedule.id,
            repository=self._repository,
            extractor=self._extractor,
            deregister=self._self_heal_callback(job_id),
            execution_timeout_seconds=self._settings.execution_timeout_seconds,
            timezone_name=self._settings.timezone,
        )
        job = self._scheduler.add_job(
            handler,
            trigger=trigger,
            id=job_id,
            name=schedule.name,
        )
        self._registry[schedule.id] = job.id
        logger.info(
            "Registered schedule %d (%s) with cron %s",
            schedule.id,
            schedule.name,
            schedule.cron_expression,
        )
        return True

    def _try_register_locked(self, schedule: Schedule) -> bool:
        try:
            return self._register_locked(schedule)
        except CronExpressionError as exc:
            logger.warning("Failed to register schedule %d: %s", schedule.id, exc)
            return False

    def _deregister_locked(self, schedule_id: int) -> bool:
        job_id = self._registry.pop(schedule_id, None)
        if job_id is None:
            return False
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            logger.debug("Job %s was already gone from the driver", job_id)
        logger.info("Deregistered schedule %d", schedule_id)
        return True

    def _restore_locked(self, previous: Schedule) -> None:
        if self._running and previous.active:
            self._try_register_locked(previous)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_schedule(self, request: CreateScheduleRequest, owner_id: int) -> Schedule:
        name = validate_name(request.name)
        url = validate_url(request.url)
        cron_expression = validate_cron_expression(
            request.cron_expression, tz=self._settings.timezone
        )
        next_run = calculate_next_run(cron_expression, tz=self._settings.timezone)

        schedule = self._repository.create(
            NewSchedule(
                owner_id=owner_id,
                name=name,
                url=url,
                cron_expression=cron_expression,
                active=True,
                next_run=next_run,
            )
        )

        with self._lock:
            if self._running and schedule.active:
                self._try_register_locked(schedule)

        log_event(
            logger,
            logging.INFO,
            "schedule_created",
            schedule_id=schedule.id,
            owner_id=owner_id,
            cron_expression=cron_expression,
        )
        return schedule

    def get_schedule(self, schedule_id: int, owner_id: int) -> Schedule:
        schedule = self._repository.find_by_id(schedule_id)
        if schedule is None or schedule.owner_id != owner_id:
            raise NotFoundError("schedule")
        return schedule

    def list_schedules(self, owner_id: int) -> list[Schedule]:
        return self._repository.find_by_owner(owner_id)

    def update_schedule(
        self,
        schedule_id: int,
        request: UpdateScheduleRequest,
        owner_id: int,
    ) -> Schedule:
        current = self.get_schedule(schedule_id, owner_id)

        changes: dict[str, object] = {}
        if request.name is not None:
            changes["name"] = validate_name(request.name)
        if request.url is not None:
            changes["url"] = validate_url(request.url)
        if request.cron_expression is not None:
            cron_expression = validate_cron_expression(
                request.cron_expression, tz=self._settings.timezone
            )
            if cron_expression != current.cron_expression:
                changes["cron_expression"] = cron_expression
                changes["next_run"] = calculate_next_run(
                    cron_expression, tz=self._settings.timezone
                )
        if request.active is not None:
            changes["active"] = request.active

        with self._lock:
            self._deregister_locked(schedule_id)
            try:
                # Only the patched columns are written; next_run stays whatever
                # the latest fire stored unless the expression changed.
                updated = self._repository.update(schedule_id, changes)
            except PersistenceError:
                self._restore_locked(current)
                raise
            if updated is None:
                raise NotFoundError("schedule")
            if self._running and updated.active:
                self._try_register_locked(updated)

        log_event(
            logger,
            logging.INFO,
            "schedule_updated",
            schedule_id=schedule_id,
            fields=sorted(changes),
            active=updated.active,
        )
        return updated

    def delete_schedule(self, schedule_id: int, owner_id: int) -> None:
        current = self.get_schedule(schedule_id, owner_id)

        with self._lock:
            self._deregister_locked(schedule_id)
            try:
                deleted = self._repository.delete(schedule_id)
            except PersistenceError:
                self._restore_locked(current)
                raise
        if not deleted:
            raise NotFoundError("schedule")

        log_event(logger, logging.INFO, "schedule_deleted", schedule_id=schedule_id)


@lru_cache(maxsize=1)
def get_schedule_orchestrator() -> ScheduleOrchestrator:
    """
    Process-wide orchestrator wired to the default database and settings.
    """

    return ScheduleOrchestrator(
        repository=ScheduleRepository(),
        extractor=get_page_extractor(),
        settings=get_scheduler_settings(),
    )
