"""
Six-field cron expression parsing.

The same parser is used to validate user input and to build the trigger the
cron driver executes, so anything accepted here is schedulable.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo

from apscheduler.triggers.cron import CronTrigger

from app.errors import ValidationError

CRON_FIELD_NAMES = ("second", "minute", "hour", "day", "month", "day_of_week")


class CronExpressionError(ValidationError):
    """Raised when a cron expression cannot be parsed or never fires."""


def parse_cron_expression(expression: str, *, tz: str | tzinfo = "UTC") -> CronTrigger:
    """
    Build a CronTrigger from ``second minute hour day month day_of_week``.
    """

    fields = expression.split()
    if len(fields) != len(CRON_FIELD_NAMES):
        raise CronExpressionError(
            f"invalid cron expression {expression!r}: expected {len(CRON_FIELD_NAMES)} "
            f"fields (second minute hour day month day_of_week), got {len(fields)}"
        )
    try:
        return CronTrigger(timezone=tz, **dict(zip(CRON_FIELD_NAMES, fields)))
    except (ValueError, TypeError) as exc:
        raise CronExpressionError(f"invalid cron expression {expression!r}: {exc}") from exc


def next_fire_time(trigger: CronTrigger, *, now: datetime | None = None) -> datetime:
    """
    Return the first fire time strictly after ``now``.
    """

    reference = now or datetime.now(timezone.utc)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)
    # CronTrigger returns fire times >= its start; nudge past ``now``.
    fire_time = trigger.get_next_fire_time(None, reference + timedelta(microseconds=1))
    if fire_time is None:
        raise CronExpressionError(f"cron expression {trigger} never fires")
    return fire_time


def calculate_next_run(
    expression: str,
    *,
    tz: str | tzinfo = "UTC",
    now: datetime | None = None,
) -> datetime:
    return next_fire_time(parse_cron_expression(expression, tz=tz), now=now)
