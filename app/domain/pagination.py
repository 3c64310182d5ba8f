"""
app/domain/pagination.py

Page/offset arithmetic shared by paginated listings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100


@dataclass(frozen=True)
class PaginationRequest:
    page: int
    per_page: int

    @classmethod
    def create(cls, page: int | None = None, per_page: int | None = None) -> "PaginationRequest":
        """
        Clamp raw paging input: page defaults to 1, per_page to 10 (max 100).
        """

        resolved_page = page if page and page > 0 else 1
        resolved_per_page = per_page if per_page and per_page > 0 else DEFAULT_PER_PAGE
        return cls(page=resolved_page, per_page=min(resolved_per_page, MAX_PER_PAGE))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


@dataclass(frozen=True)
class PaginationInfo:
    current_page: int
    per_page: int
    total_items: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, request: PaginationRequest, total_items: int) -> "PaginationInfo":
        total_pages = (total_items + request.per_page - 1) // request.per_page
        return cls(
            current_page=request.page,
            per_page=request.per_page,
            total_items=total_items,
            total_pages=total_pages,
            has_next=request.page < total_pages,
            has_prev=request.page > 1,
        )


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    pagination: PaginationInfo
