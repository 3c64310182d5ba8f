"""
app/repositories/schedule_repository.py

Persistence layer for schedule definitions and their run statistics.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select, update

from app.domain.schedule import NewSchedule, Schedule
from app.repositories.base import SessionScopedRepository, as_utc
from db.models.schedule import ScheduleRecord

EDITABLE_FIELDS = frozenset({"name", "url", "cron_expression", "active", "next_run"})


def _to_domain(record: ScheduleRecord) -> Schedule:
    return Schedule(
        id=record.id,
        owner_id=record.owner_id,
        name=record.name,
        url=record.url,
        cron_expression=record.cron_expression,
        active=record.active,
        run_count=record.run_count,
        last_run=as_utc(record.last_run),
        next_run=as_utc(record.next_run),
        created_at=as_utc(record.created_at),
        updated_at=as_utc(record.updated_at),
    )


class ScheduleRepository(SessionScopedRepository):
    """
    Repository for the ``schedules`` table.
    """

    def create(self, schedule: NewSchedule) -> Schedule:
        with self._scope("create schedule") as session:
            record = ScheduleRecord(
                owner_id=schedule.owner_id,
                name=schedule.name,
                url=schedule.url,
                cron_expression=schedule.cron_expression,
                active=schedule.active,
                next_run=schedule.next_run,
                run_count=0,
            )
            session.add(record)
            session.flush()
            session.refresh(record)
            return _to_domain(record)

    def find_by_id(self, schedule_id: int) -> Schedule | None:
        with self._scope("find schedule") as session:
            record = session.get(ScheduleRecord, schedule_id)
            return _to_domain(record) if record is not None else None

    def find_by_owner(self, owner_id: int) -> list[Schedule]:
        stmt = (
            select(ScheduleRecord)
            .where(ScheduleRecord.owner_id == owner_id)
            .order_by(ScheduleRecord.created_at.desc(), ScheduleRecord.id.desc())
        )
        with self._scope("find owner schedules") as session:
            return [_to_domain(record) for record in session.scalars(stmt).all()]

    def find_all_active(self) -> list[Schedule]:
        stmt = (
            select(ScheduleRecord)
            .where(ScheduleRecord.active.is_(True))
            .order_by(ScheduleRecord.next_run.asc(), ScheduleRecord.id.asc())
        )
        with self._scope("find active schedules") as session:
            return [_to_domain(record) for record in session.scalars(stmt).all()]

    def update(self, schedule_id: int, changes: Mapping[str, Any]) -> Schedule | None:
        """
        Write only the given user-editable columns. Returns None if the row is gone.
        """

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"not editable schedule fields: {sorted(unknown)}")

        with self._scope("update schedule") as session:
            if changes:
                result = session.execute(
                    update(ScheduleRecord)
                    .where(ScheduleRecord.id == schedule_id)
                    .values(**changes)
                )
                if not result.rowcount:
                    return None
            record = session.get(ScheduleRecord, schedule_id)
            return _to_domain(record) if record is not None else None

    def delete(self, schedule_id: int) -> bool:
        with self._scope("delete schedule") as session:
            result = session.execute(delete(ScheduleRecord).where(ScheduleRecord.id == schedule_id))
            return bool(result.rowcount)

    def update_last_run(self, schedule_id: int, last_run: datetime, run_count: int) -> None:
        with self._scope("update last run") as session:
            session.execute(
                update(ScheduleRecord)
                .where(ScheduleRecord.id == schedule_id)
                .values(last_run=last_run, run_count=run_count)
            )

    def update_next_run(self, schedule_id: int, next_run: datetime) -> None:
        with self._scope("update next run") as session:
            session.execute(
                update(ScheduleRecord)
                .where(ScheduleRecord.id == schedule_id)
                .values(next_run=next_run)
            )
