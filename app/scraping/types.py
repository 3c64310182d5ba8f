"""
Shared scraping runtime data models.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from app.domain.scraping import Header
from app.errors import DeadlineExceededError


class Deadline:
    """
    Monotonic-clock expiry handed down to every network call of one operation.
    """

    def __init__(self, expires_at: float) -> None:
        self._expires_at = expires_at

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(time.monotonic() + max(0.0, seconds))

    def remaining(self) -> float:
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self._expires_at

    def earliest(self, other: "Deadline | None") -> "Deadline":
        if other is None or self._expires_at <= other._expires_at:
            return self
        return other

    def clamp(self, timeout_seconds: float) -> float:
        """
        Shrink a per-call timeout so it never outlives this deadline.
        """

        # urllib3 rejects non-positive timeouts.
        return max(0.001, min(timeout_seconds, self.remaining()))

    def check(self, operation: str) -> None:
        if self.expired:
            raise DeadlineExceededError(f"deadline exceeded during {operation}")


@dataclass(frozen=True)
class FetchedPage:
    """
    Raw outcome of the main GET request.
    """

    url: str
    status_code: int
    content_type: str
    body: str
    load_time_ms: int


@dataclass
class ParsedPage:
    """
    Fields collected by one walk over the DOM tree.
    """

    title: str = ""
    description: str = ""
    keywords: str = ""
    author: str = ""
    language: str = ""
    image_url: str = ""
    site_name: str = ""
    links: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    headers: list[Header] = field(default_factory=list)
