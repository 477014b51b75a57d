"""
Pagination for list endpoints whose rows are built in memory (grouped history).
"""
from typing import TypeVar, Generic, List

from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response wrapper."""
    items: List[T]
    total: int
    page: int
    limit: int
    pages: int
    has_next: bool
    has_prev: bool


def paginate_list(items: List[T], page: int = 1, limit: int = 20) -> dict:
    """
    Cut one page out of a fully built list.

    Returns the page's items along with the total, the page count and
    whether there are pages on either side.
    """
    total = len(items)
    pages = -(-total // limit) if limit > 0 else 0
    start = (page - 1) * limit
    return {
        "items": items[start:start + limit],
        "total": total,
        "page": page,
        "limit": limit,
        "pages": pages,
        "has_next": page < pages,
        "has_prev": page > 1,
    }
