from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import get_log_level, get_scheduler_settings
from app.logging_utils import configure_logging

logger = logging.getLogger(__name__)


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Every table registered on Base.metadata must exist in the database.

    Does NOT auto-migrate; a missing table aborts startup.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401 - registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        logger.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema, start the scheduler on boot; stop it on exit."""
    _check_db()
    logger.info("Database connectivity confirmed")
    _check_schema()
    logger.info("Database schema validated")

    from app.scheduler.orchestrator import get_schedule_orchestrator

    orchestrator = get_schedule_orchestrator()
    if get_scheduler_settings().autostart:
        orchestrator.start()
        logger.info("Scheduler started with %d jobs", orchestrator.get_status().active_jobs)
    try:
        yield
    finally:
        if orchestrator.is_running:
            orchestrator.stop()
            logger.info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    configure_logging(get_log_level())

    application = FastAPI(
        title="Web Scraper API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import schedule_router, scheduler_router, scraping_router

    application.include_router(scraping_router)
    application.include_router(schedule_router)
    application.include_router(scheduler_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
