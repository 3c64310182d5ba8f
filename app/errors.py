"""
app/errors.py

Application exception hierarchy. Every error carries a stable ``code`` so
callers (HTTP layer, CLI) can map failures without string matching.
"""

from __future__ import annotations

CODE_VALIDATION = "VALIDATION_ERROR"
CODE_NOT_FOUND = "NOT_FOUND"
CODE_FETCH = "FETCH_ERROR"
CODE_PARSE = "PARSE_ERROR"
CODE_DATABASE = "DATABASE_ERROR"


class ScraperAppError(Exception):
    """Base exception for scraping and scheduling failures."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ValidationError(ScraperAppError):
    """Raised when request input is rejected before any state change."""

    code = CODE_VALIDATION


class NotFoundError(ScraperAppError):
    """Raised when a resource is missing or not owned by the caller."""

    code = CODE_NOT_FOUND

    def __init__(self, resource: str) -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource


class FetchError(ScraperAppError):
    """Raised when the main page fetch fails at the transport level."""

    code = CODE_FETCH


class DeadlineExceededError(FetchError):
    """Raised when an operation runs past its enclosing deadline."""


class PageParseError(ScraperAppError):
    """Raised when a fetched body cannot be turned into a DOM tree."""

    code = CODE_PARSE


class PersistenceError(ScraperAppError):
    """Raised when a repository call fails."""

    code = CODE_DATABASE

    def __init__(self, operation: str) -> None:
        super().__init__(f"database {operation} failed")
        self.operation = operation
