"""
Pagination primitives.

Pages are 0-indexed. Page sizes are clamped, never rejected.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
FETCH_ALL_PAGE_SIZE = 100


def clamp_page_size(count: int | None) -> int:
    """Clamp a requested page size to ``[1, MAX_PAGE_SIZE]``; None means the default."""
    if count is None:
        return DEFAULT_PAGE_SIZE
    return max(1, min(MAX_PAGE_SIZE, count))


def clamp_page(page: int | None) -> int:
    """Pages below 0 are treated as the first page."""
    return max(0, page or 0)


class Page(BaseModel, Generic[T]):
    """One page of a list result."""

    model_config = ConfigDict(frozen=True)

    items: list[T] = Field(default_factory=list, description="Items on this page")
    page: int = Field(default=0, ge=0, description="0-indexed page number")
    count: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, description="Requested page size")
    total: int | None = Field(default=None, ge=0, description="Total items, when known")
    has_more: bool = Field(default=False, description="Whether a later page exists")

    @classmethod
    def build(
        cls,
        items: list[T],
        page: int,
        count: int,
        total: int | None = None,
        has_more: bool | None = None,
    ) -> Page[T]:
        """
        Build a page, deriving ``has_more`` when the server did not report it.

        With a known total, more pages exist while ``(page + 1) * count`` is
        below it. Without one, a full page is taken to mean there may be more.
        """
        if has_more is None:
            if total is not None:
                has_more = (page + 1) * count < total
            else:
                has_more = len(items) >= count
        return cls(items=items, page=page, count=count, total=total, has_more=has_more)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def next_page(self) -> int | None:
        return self.page + 1 if self.has_more else None
