"""
Pagination primitives for Infiniscroll.

This module provides the cursor-mode batch model returned by fetch functions,
plus small pure helpers shared by the page-based strategy and by callers that
paginate an in-memory list.
"""

from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginatedResult(BaseModel):
    """
    Represents a single cursor-addressed batch returned by a fetch function.

    Attributes:
        items: Items of this batch, in server order
        next_cursor: Opaque token for the next batch (None when the server has none)
        has_more: Whether the server reports further batches

    Fetch functions may return this model or a plain mapping using either
    snake_case or camelCase keys ({"items": [...], "nextCursor": ..., "hasMore": ...}).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    items: list[Any] = Field(default_factory=list)
    next_cursor: str | None = Field(default=None, alias="nextCursor")
    has_more: bool = Field(alias="hasMore")

    @property
    def count(self) -> int:
        """Number of items in this batch."""
        return len(self.items)


def has_more_items(
    last_batch: Sequence[T], all_pages: Sequence[Sequence[T]], page_size: int
) -> bool:
    """
    Default "more data available" rule for page-based pagination.

    A batch at full capacity is treated as "might have more", so an exact
    multiple of page_size costs one trailing empty fetch.
    """
    return len(last_batch) >= page_size


def get_page_slice(items: Sequence[T], page: int, page_size: int) -> list[T]:
    """
    Returns the items of a 0-indexed page for client-side pagination.

    Args:
        items: The full list to paginate
        page: Page number (0-indexed)
        page_size: Number of items per page

    Returns:
        The slice for the page, empty when the page is past the end
    """
    start = page * page_size
    return list(items[start : start + page_size])
