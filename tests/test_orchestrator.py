"""
tests/test_orchestrator.py

ScheduleOrchestrator lifecycle, CRUD and registry consistency.

Cron expressions here fire at most once a year so no job runs during a test,
apart from the ticking tests at the end which drive a real per-second job.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from dataclasses import replace
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine

from app.config import SchedulerSettings
from app.domain.schedule import CreateScheduleRequest, NewSchedule, UpdateScheduleRequest
from app.domain.scraping import ScrapeResult
from app.errors import NotFoundError, PersistenceError, ValidationError
from app.repositories.schedule_repository import ScheduleRepository
from app.scheduler.orchestrator import ScheduleOrchestrator
from app.scheduler.trigger import ScheduleTriggerHandler
from db.base import Base
from db.session import build_session_factory

YEARLY = "0 0 0 1 1 *"
OWNER = 1
OTHER_OWNER = 2


@pytest.fixture()
def orchestrator(schedule_repository, extractor) -> Iterator[ScheduleOrchestrator]:
    orchestrator = ScheduleOrchestrator(
        repository=schedule_repository,
        extractor=extractor,
        settings=SchedulerSettings(max_workers=2),
    )
    yield orchestrator
    if orchestrator.is_running:
        orchestrator.stop()


def _create(orchestrator: ScheduleOrchestrator, name: str = "yearly", cron: str = YEARLY):
    return orchestrator.create_schedule(
        CreateScheduleRequest(name=name, url="https://example.com", cron_expression=cron),
        OWNER,
    )


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_start_registers_only_active_schedules(self, orchestrator, schedule_repository) -> None:
        for name, active in (("a", True), ("b", True), ("c", False)):
            schedule_repository.create(
                NewSchedule(
                    owner_id=OWNER,
                    name=name,
                    url="https://example.com",
                    cron_expression=YEARLY,
                    active=active,
                    next_run=None,
                )
            )

        orchestrator.start()

        status = orchestrator.get_status()
        assert status.is_running is True
        assert status.active_jobs == 2
        assert status.cron_entries == 2

    def test_start_skips_unparseable_stored_expressions(
        self, orchestrator, schedule_repository
    ) -> None:
        schedule_repository.create(
            NewSchedule(
                owner_id=OWNER,
                name="broken",
                url="https://example.com",
                cron_expression="not a cron",
                active=True,
                next_run=None,
            )
        )

        orchestrator.start()

        assert orchestrator.get_status().active_jobs == 0

    def test_start_twice_is_a_no_op(self, orchestrator) -> None:
        _create(orchestrator)
        orchestrator.start()
        orchestrator.start()

        assert orchestrator.get_status().active_jobs == 1

    def test_stop_clears_registry_and_restart_reloads(self, orchestrator) -> None:
        _create(orchestrator)
        orchestrator.start()

        orchestrator.stop()
        stopped = orchestrator.get_status()
        assert stopped.is_running is False
        assert stopped.active_jobs == 0
        assert stopped.cron_entries == 0

        orchestrator.start()
        assert orchestrator.get_status().active_jobs == 1

    def test_stop_when_not_running(self, orchestrator) -> None:
        orchestrator.stop()
        assert orchestrator.get_status().is_running is False


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_duplicate_registration_yields_one_job(self, orchestrator) -> None:
        schedule = _create(orchestrator)

        assert orchestrator.register(schedule) is True
        assert orchestrator.register(schedule) is False

        status = orchestrator.get_status()
        assert status.active_jobs == 1
        assert status.cron_entries == 1

    def test_deregister_unknown_id(self, orchestrator) -> None:
        assert orchestrator.deregister(12345) is False

    def test_orphaned_job_removes_itself(
        self, orchestrator, schedule_repository, extractor
    ) -> None:
        schedule = _create(orchestrator)
        orchestrator.start()
        schedule_repository.delete(schedule.id)

        ScheduleTriggerHandler(
            schedule.id,
            repository=schedule_repository,
            extractor=extractor,
            deregister=orchestrator.deregister,
            execution_timeout_seconds=60,
        )()

        assert orchestrator.registered_schedule_ids() == set()
        assert orchestrator.get_status().cron_entries == 0

    def test_reregistration_gets_a_new_job_id(self, orchestrator) -> None:
        schedule = _create(orchestrator)
        orchestrator.start()
        first = orchestrator.registered_job_id(schedule.id)

        orchestrator.deregister(schedule.id)
        orchestrator.register(schedule)

        assert orchestrator.registered_job_id(schedule.id) not in (None, first)
        assert orchestrator.deregister_if_current(schedule.id, first) is False
        assert orchestrator.registered_schedule_ids() == {schedule.id}

    def test_handler_from_earlier_registration_keeps_replacement(
        self, orchestrator, schedule_repository, extractor, monkeypatch
    ) -> None:
        schedule = _create(orchestrator)
        orchestrator.start()
        earlier_job_id = orchestrator.registered_job_id(schedule.id)

        orchestrator.update_schedule(schedule.id, UpdateScheduleRequest(active=False), OWNER)
        orchestrator.update_schedule(schedule.id, UpdateScheduleRequest(active=True), OWNER)

        # The earlier job read the row while it was still inactive.
        inactive = replace(schedule, active=False)
        monkeypatch.setattr(schedule_repository, "find_by_id", lambda schedule_id: inactive)

        ScheduleTriggerHandler(
            schedule.id,
            repository=schedule_repository,
            extractor=extractor,
            deregister=lambda schedule_id: orchestrator.deregister_if_current(
                schedule_id, earlier_job_id
            ),
            execution_timeout_seconds=60,
        )()

        assert orchestrator.registered_schedule_ids() == {schedule.id}
        assert orchestrator.get_status().cron_entries == 1

    def test_concurrent_register_and_deregister_stay_consistent(self, orchestrator) -> None:
        schedule = _create(orchestrator)
        orchestrator.start()

        def churn() -> None:
            for _ in range(50):
                orchestrator.register(schedule)
                orchestrator.deregister(schedule.id)

        threads = [threading.Thread(target=churn) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        status = orchestrator.get_status()
        assert status.active_jobs == status.cron_entries
        assert status.active_jobs in (0, 1)


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


class TestCreate:
    def test_create_while_stopped_persists_without_registering(self, orchestrator) -> None:
        schedule = _create(orchestrator)

        assert schedule.id is not None
        assert schedule.active is True
        assert schedule.run_count == 0
        assert schedule.next_run > datetime.now(timezone.utc)
        assert orchestrator.get_status().active_jobs == 0

    def test_create_while_running_registers(self, orchestrator) -> None:
        orchestrator.start()

        schedule = _create(orchestrator)

        assert orchestrator.registered_schedule_ids() == {schedule.id}

    @pytest.mark.parametrize(
        ("name", "url", "cron"),
        [
            ("", "https://example.com", YEARLY),
            ("ok", "example.com", YEARLY),
            ("ok", "https://example.com", "0 0 * * *"),
        ],
    )
    def test_invalid_input_stores_nothing(self, orchestrator, name, url, cron) -> None:
        with pytest.raises(ValidationError):
            orchestrator.create_schedule(
                CreateScheduleRequest(name=name, url=url, cron_expression=cron), OWNER
            )
        assert orchestrator.list_schedules(OWNER) == []


class TestRead:
    def test_get_and_list_are_owner_scoped(self, orchestrator) -> None:
        schedule = _create(orchestrator)

        assert orchestrator.get_schedule(schedule.id, OWNER) == schedule
        assert [s.id for s in orchestrator.list_schedules(OWNER)] == [schedule.id]
        assert orchestrator.list_schedules(OTHER_OWNER) == []
        with pytest.raises(NotFoundError):
            orchestrator.get_schedule(schedule.id, OTHER_OWNER)

    def test_get_missing(self, orchestrator) -> None:
        with pytest.raises(NotFoundError):
            orchestrator.get_schedule(999, OWNER)


class TestUpdate:
    def test_cron_change_recomputes_next_run_and_stays_registered(self, orchestrator) -> None:
        schedule = _create(orchestrator)
        orchestrator.start()

        updated = orchestrator.update_schedule(
            schedule.id, UpdateScheduleRequest(cron_expression="0 0 12 1 7 *"), OWNER
        )

        assert updated.cron_expression == "0 0 12 1 7 *"
        assert (updated.next_run.month, updated.next_run.day, updated.next_run.hour) == (7, 1, 12)
        assert orchestrator.registered_schedule_ids() == {schedule.id}
        assert orchestrator.get_status().cron_entries == 1

    def test_partial_update_leaves_other_fields(self, orchestrator) -> None:
        schedule = _create(orchestrator)

        updated = orchestrator.update_schedule(
            schedule.id, UpdateScheduleRequest(name="renamed"), OWNER
        )

        assert updated.name == "renamed"
        assert updated.url == schedule.url
        assert updated.cron_expression == schedule.cron_expression
        assert updated.next_run == schedule.next_run

    def test_update_keeps_next_run_written_by_a_fire(
        self, orchestrator, schedule_repository, monkeypatch
    ) -> None:
        schedule = _create(orchestrator)
        fired_next_run = datetime(2099, 1, 1, tzinfo=timezone.utc)
        find_by_id = schedule_repository.find_by_id

        def find_then_fire(schedule_id):
            # A fire stores its next_run right after the update read the row.
            snapshot = find_by_id(schedule_id)
            schedule_repository.update_next_run(schedule_id, fired_next_run)
            return snapshot

        monkeypatch.setattr(schedule_repository, "find_by_id", find_then_fire)

        updated = orchestrator.update_schedule(
            schedule.id, UpdateScheduleRequest(name="renamed"), OWNER
        )

        assert updated.name == "renamed"
        assert updated.next_run == fired_next_run
        assert find_by_id(schedule.id).next_run == fired_next_run

    def test_deactivate_and_reactivate(self, orchestrator) -> None:
        schedule = _create(orchestrator)
        orchestrator.start()

        orchestrator.update_schedule(schedule.id, UpdateScheduleRequest(active=False), OWNER)
        assert orchestrator.registered_schedule_ids() == set()

        orchestrator.update_schedule(schedule.id, UpdateScheduleRequest(active=True), OWNER)
        assert orchestrator.registered_schedule_ids() == {schedule.id}

    def test_invalid_update_changes_nothing(self, orchestrator) -> None:
        schedule = _create(orchestrator)
        orchestrator.start()

        with pytest.raises(ValidationError):
            orchestrator.update_schedule(
                schedule.id, UpdateScheduleRequest(cron_expression="bad"), OWNER
            )

        assert orchestrator.registered_schedule_ids() == {schedule.id}
        assert orchestrator.get_schedule(schedule.id, OWNER) == schedule

    def test_update_by_other_owner_is_not_found(self, orchestrator) -> None:
        schedule = _create(orchestrator)

        with pytest.raises(NotFoundError):
            orchestrator.update_schedule(
                schedule.id, UpdateScheduleRequest(name="mine"), OTHER_OWNER
            )

    def test_persistence_failure_restores_registration(
        self, orchestrator, schedule_repository, monkeypatch
    ) -> None:
        schedule = _create(orchestrator)
        orchestrator.start()

        def failing_update(schedule_id, changes):
            raise PersistenceError("update schedule")

        monkeypatch.setattr(schedule_repository, "update", failing_update)

        with pytest.raises(PersistenceError):
            orchestrator.update_schedule(schedule.id, UpdateScheduleRequest(active=False), OWNER)
        assert orchestrator.registered_schedule_ids() == {schedule.id}


class TestDelete:
    def test_delete_removes_row_and_job(self, orchestrator) -> None:
        schedule = _create(orchestrator)
        orchestrator.start()

        orchestrator.delete_schedule(schedule.id, OWNER)

        assert orchestrator.registered_schedule_ids() == set()
        with pytest.raises(NotFoundError):
            orchestrator.get_schedule(schedule.id, OWNER)

    def test_delete_by_other_owner_is_not_found(self, orchestrator) -> None:
        schedule = _create(orchestrator)

        with pytest.raises(NotFoundError):
            orchestrator.delete_schedule(schedule.id, OTHER_OWNER)
        assert orchestrator.get_schedule(schedule.id, OWNER) == schedule

    def test_persistence_failure_restores_registration(
        self, orchestrator, schedule_repository, monkeypatch
    ) -> None:
        schedule = _create(orchestrator)
        orchestrator.start()

        def failing_delete(schedule_id):
            raise PersistenceError("delete schedule")

        monkeypatch.setattr(schedule_repository, "delete", failing_delete)

        with pytest.raises(PersistenceError):
            orchestrator.delete_schedule(schedule.id, OWNER)
        assert orchestrator.registered_schedule_ids() == {schedule.id}
        assert orchestrator.get_status().cron_entries == 1


# ---------------------------------------------------------------------------
# Ticking driver
# ---------------------------------------------------------------------------

EVERY_SECOND = "* * * * * *"


class CountingExtractor:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.fired_seconds: list[int] = []

    @property
    def fires(self) -> int:
        with self._lock:
            return len(self.fired_seconds)

    def extract(self, url, owner_id, **kwargs) -> ScrapeResult:
        with self._lock:
            self.fired_seconds.append(int(time.time()))
        return ScrapeResult(
            url=url,
            owner_id=owner_id,
            status_code=200,
            created_at=datetime.now(timezone.utc),
            id=1,
        )


@pytest.fixture()
def counting_extractor() -> CountingExtractor:
    return CountingExtractor()


@pytest.fixture()
def ticking_orchestrator(tmp_path, counting_extractor) -> Iterator[ScheduleOrchestrator]:
    # Worker threads get their own connections, so use a file database.
    engine = create_engine(
        f"sqlite:///{tmp_path / 'schedules.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    orchestrator = ScheduleOrchestrator(
        repository=ScheduleRepository(build_session_factory(engine)),
        extractor=counting_extractor,
        settings=SchedulerSettings(max_workers=2),
    )
    yield orchestrator
    if orchestrator.is_running:
        orchestrator.stop()
    engine.dispose()


class TestTicking:
    def test_fires_once_per_tick(self, ticking_orchestrator, counting_extractor) -> None:
        schedule = _create(ticking_orchestrator, name="every second", cron=EVERY_SECOND)
        ticking_orchestrator.start()
        ticking_orchestrator.register(schedule)

        time.sleep(2.5)

        seconds = list(counting_extractor.fired_seconds)
        assert len(seconds) >= 1
        assert len(seconds) == len(set(seconds))
        assert ticking_orchestrator.get_status().cron_entries == 1

    def test_no_fires_after_delete(self, ticking_orchestrator, counting_extractor) -> None:
        schedule = _create(ticking_orchestrator, name="every second", cron=EVERY_SECOND)
        ticking_orchestrator.start()
        time.sleep(1.5)

        ticking_orchestrator.delete_schedule(schedule.id, OWNER)
        time.sleep(0.3)
        settled = counting_extractor.fires
        time.sleep(1.5)

        assert counting_extractor.fires == settled
        assert ticking_orchestrator.get_status().cron_entries == 0
