"""
Pagination value objects shared by every paginated selector.

Pages are 1-based.  ``total_pages`` is ``ceil(total / limit)``, so an empty
result has zero pages.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    """A 1-based page number and a page size."""

    page: int = 1
    limit: int = 20

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the unpaginated total."""

    items: tuple[T, ...]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @classmethod
    def empty(cls, request: PageRequest) -> Page[T]:
        return cls(items=(), total=0, page=request.page, limit=request.limit)

    @classmethod
    def slice(cls, rows: list[T], request: PageRequest) -> Page[T]:
        """Paginate an already materialized, already ordered list."""
        window = rows[request.offset:request.offset + request.limit]
        return cls(
            items=tuple(window),
            total=len(rows),
            page=request.page,
            limit=request.limit,
        )
