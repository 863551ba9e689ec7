"""Client-side pagination helpers."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_ITEMS_PER_PAGE = 20


@dataclass
class PaginatedResult(Generic[T]):
    items: list[T]
    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_previous_page: bool


def paginate_items(
    items: Sequence[T],
    current_page: int,
    items_per_page: int = DEFAULT_ITEMS_PER_PAGE,
) -> PaginatedResult[T]:
    """Slice one page out of a list.

    The requested page is clamped to [1, total_pages]; an empty list still
    has one (empty) page.

    Raises:
        ValueError: If items_per_page is not positive.
    """
    if items_per_page < 1:
        raise ValueError("items_per_page must be at least 1")

    total_items = len(items)
    total_pages = max(1, math.ceil(total_items / items_per_page))
    page = max(1, min(current_page, total_pages))

    start, end = get_page_range(page, items_per_page)
    return PaginatedResult(
        items=list(items[start:end]),
        current_page=page,
        total_pages=total_pages,
        total_items=total_items,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )


def get_page_for_index(index: int, items_per_page: int = DEFAULT_ITEMS_PER_PAGE) -> int:
    """Return the 1-based page holding the 0-based item index."""
    return index // items_per_page + 1


def get_page_range(page: int, items_per_page: int = DEFAULT_ITEMS_PER_PAGE) -> tuple[int, int]:
    """Return the (start, end) slice bounds for a 1-based page."""
    start = (page - 1) * items_per_page
    return start, start + items_per_page
