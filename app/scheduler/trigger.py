"""
Per-schedule callback executed by the cron driver.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from app.errors import CODE_DATABASE, PersistenceError, ScraperAppError
from app.logging_utils import log_event
from app.repositories.schedule_repository import ScheduleRepository
from app.scheduler.cron import CronExpressionError, calculate_next_run
from app.scraping.extractor import PageExtractor
from app.scraping.types import Deadline

logger = logging.getLogger(__name__)


class ScheduleTriggerHandler:
    """
    Bound to a schedule ID only. Every fire re-reads the stored schedule so
    edits made after registration are always honoured.
    """

    def __init__(
        self,
        schedule_id: int,
        *,
        repository: ScheduleRepository,
        extractor: PageExtractor,
        deregister: Callable[[int], bool],
        execution_timeout_seconds: float,
        timezone_name: str = "UTC",
    ) -> None:
        self.schedule_id = schedule_id
        self._repository = repository
        self._extractor = extractor
        self._deregister = deregister
        self._execution_timeout_seconds = execution_timeout_seconds
        self._timezone_name = timezone_name

    def __call__(self) -> None:
        try:
            schedule = self._repository.find_by_id(self.schedule_id)
        except PersistenceError as exc:
            log_event(
                logger,
                logging.ERROR,
                "scheduled_scrape_load_failed",
                schedule_id=self.schedule_id,
                error=str(exc),
            )
            return

        if schedule is None:
            logger.warning("Schedule %d not found, removing from cron", self.schedule_id)
            self._deregister(self.schedule_id)
            return
        if not schedule.active:
            logger.warning("Schedule %d is no longer active, removing from cron", self.schedule_id)
            self._deregister(self.schedule_id)
            return

        fired_at = datetime.now(timezone.utc)
        log_event(
            logger,
            logging.INFO,
            "scheduled_scrape_started",
            schedule_id=schedule.id,
            name=schedule.name,
            url=schedule.url,
        )
        try:
            result = self._extractor.extract(
                schedule.url,
                schedule.owner_id,
                deadline=Deadline.after(self._execution_timeout_seconds),
            )
        except ScraperAppError as exc:
            log_event(
                logger,
                logging.ERROR,
                "scheduled_scrape_failed",
                schedule_id=schedule.id,
                url=schedule.url,
                code=exc.code,
                error=exc.message,
            )
        else:
            log_event(
                logger,
                logging.INFO,
                "scheduled_scrape_completed",
                schedule_id=schedule.id,
                result_id=result.id,
                status_code=result.status_code,
            )
        finally:
            # A run is an attempt: counted whether or not extraction succeeded.
            self._record_attempt(schedule.run_count + 1, fired_at)
            self._refresh_next_run()

    def _record_attempt(self, run_count: int, fired_at: datetime) -> None:
        try:
            self._repository.update_last_run(self.schedule_id, fired_at, run_count)
        except PersistenceError as exc:
            log_event(
                logger,
                logging.ERROR,
                "scheduled_scrape_stats_failed",
                schedule_id=self.schedule_id,
                code=CODE_DATABASE,
                error=str(exc),
            )

    def _refresh_next_run(self) -> None:
        # Re-read so an edit made while extracting is not overwritten with a
        # time computed from the old expression.
        try:
            current = self._repository.find_by_id(self.schedule_id)
            if current is None:
                return
            next_run = calculate_next_run(current.cron_expression, tz=self._timezone_name)
            self._repository.update_next_run(self.schedule_id, next_run)
        except (CronExpressionError, PersistenceError) as exc:
            log_event(
                logger,
                logging.ERROR,
                "next_run_update_failed",
                schedule_id=self.schedule_id,
                error=str(exc),
            )
            return
        logger.info("Next run for schedule %d: %s", self.schedule_id, next_run.isoformat())
