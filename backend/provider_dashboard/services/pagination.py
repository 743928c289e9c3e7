from __future__ import annotations

import math
from typing import Sequence, TypeVar

from ..schemas.pagination import Page

T = TypeVar("T")


def paginate(items: Sequence[T], page: int = 1, page_size: int = 10) -> Page[T]:
    """Slice an already sorted sequence into a 1-based page.

    Pages past the end come back empty rather than raising so a stale
    page number in the UI never errors.
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    total = len(items)
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        total_pages=math.ceil(total / page_size),
        current_page=page,
        total_items=total,
    )
