from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Sequence, Tuple, TypeVar

from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

T = TypeVar("T")


def normalize_pagination(page, page_size) -> Tuple[int, int]:
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = DEFAULT_PAGE
    try:
        page_size = int(page_size)
    except (TypeError, ValueError):
        page_size = DEFAULT_PAGE_SIZE

    if page < 1:
        page = DEFAULT_PAGE
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        page_size = DEFAULT_PAGE_SIZE
    return page, page_size


def offset_for(page: int, page_size: int) -> int:
    return (page - 1) * page_size


@dataclass(frozen=True)
class Page(Generic[T]):
    data: List[T] = field(default_factory=list)
    total: int = 0
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total / self.page_size)

    def to_dict(self, serialize: Callable[[T], Any]) -> dict:
        return {
            "data": [serialize(item) for item in self.data],
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
        }


def build_page(rows: Sequence[T], total: int, page: int, page_size: int) -> Page[T]:
    return Page(data=list(rows), total=int(total), page=page, page_size=page_size)
