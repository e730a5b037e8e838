"""Page-based pagination over Protean query sets."""

import math
from dataclasses import dataclass, field


@dataclass
class Page:
    items: list = field(default_factory=list)
    current_page: int = 1
    items_per_page: int = 10
    total_items: int = 0

    @property
    def total_pages(self) -> int:
        if not self.items_per_page:
            return 0
        return math.ceil(self.total_items / self.items_per_page)

    def meta(self) -> dict:
        return {
            "current_page": self.current_page,
            "total_pages": self.total_pages,
            "total_items": self.total_items,
            "items_per_page": self.items_per_page,
        }


def paginate(queryset, page: int = 1, limit: int = 10) -> Page:
    """Slice ``queryset`` to the 1-based ``page`` of ``limit`` records."""
    page = max(int(page or 1), 1)
    limit = max(int(limit or 1), 1)
    results = queryset.offset((page - 1) * limit).limit(limit).all()
    return Page(items=list(results.items), current_page=page, items_per_page=limit, total_items=results.total)
