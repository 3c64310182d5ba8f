"""
app/api/dependencies.py

Shared FastAPI dependencies and error translation.
"""

from __future__ import annotations

from fastapi import Header, HTTPException, status

from app.errors import (
    FetchError,
    NotFoundError,
    PageParseError,
    PersistenceError,
    ScraperAppError,
    ValidationError,
)

OWNER_HEADER = "X-User-Id"

_STATUS_BY_ERROR: tuple[tuple[type[ScraperAppError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (FetchError, status.HTTP_502_BAD_GATEWAY),
    (PageParseError, status.HTTP_502_BAD_GATEWAY),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def get_owner_id(x_user_id: str | None = Header(default=None)) -> int:
    """
    Resolve the calling user from the ``X-User-Id`` header.
    """

    raw_value = (x_user_id or "").strip()
    if not raw_value:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"{OWNER_HEADER} header is required.",
        )
    try:
        owner_id = int(raw_value)
    except ValueError:
        owner_id = 0
    if owner_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"{OWNER_HEADER} must be a positive integer.",
        )
    return owner_id


def to_http_exception(exc: ScraperAppError) -> HTTPException:
    """
    Map an application error to the HTTP status its code stands for.
    """

    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(
                status_code=status_code,
                detail={"code": exc.code, "message": exc.message},
            )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"code": exc.code, "message": exc.message},
    )
