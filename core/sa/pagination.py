# core/sa/pagination.py
from dataclasses import dataclass, field
from typing import Any, List

from sqlalchemy.orm import Query

PAGE_LIMIT = 10

# Largest page whose offset still fits a signed 64-bit integer
MAX_PAGE = (2 ** 63 - 1) // PAGE_LIMIT


def parse_page(value: Any) -> int:
    """Coerce a raw ``page`` parameter into a 1-based page number.

    Missing, non-numeric, non-positive and out of range values all fall back
    to page 1.
    """
    try:
        page = int(value)
    except (TypeError, ValueError, OverflowError):
        return 1
    return page if 1 <= page <= MAX_PAGE else 1


def page_offset(page: int, limit: int = PAGE_LIMIT) -> int:
    return (page - 1) * limit


@dataclass
class Page:
    """Envelope returned by every paginated read.

    ``total`` counts canonical rows. For a single-language listing it is not
    reduced by entities missing that language, so a page may hold fewer than
    ``limit`` items even when more pages follow.
    """
    items: List[Any] = field(default_factory=list)
    page: int = 1
    limit: int = PAGE_LIMIT
    total: int = 0

    def to_dict(self) -> dict:
        return {
            "items": self.items,
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
        }


def paginate(query: Query, page: int, limit: int = PAGE_LIMIT) -> List[Any]:
    """Apply skip/take for the given page to a query and return its rows"""
    return query.offset(page_offset(page, limit)).limit(limit).all()
