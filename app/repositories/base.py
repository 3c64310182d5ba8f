"""
app/repositories/base.py

Session handling shared by the SQLAlchemy repositories.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import PersistenceError
from db.session import SessionFactory, SessionLocal, session_scope

logger = logging.getLogger(__name__)


def as_utc(value: datetime | None) -> datetime | None:
    """
    SQLite hands back naive datetimes; treat them as UTC.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SessionScopedRepository:
    """
    Opens one short-lived session per repository call so instances can be
    shared across scheduler worker threads.
    """

    def __init__(self, session_factory: SessionFactory = SessionLocal) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _scope(self, operation: str) -> Iterator[Session]:
        try:
            with session_scope(self._session_factory) as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Repository operation failed operation=%s: %s", operation, exc)
            raise PersistenceError(operation) from exc
