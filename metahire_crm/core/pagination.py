"""
Pagination utilities for the MetaHire CRM API.
Provides consistent pagination across all list endpoints.
"""
from typing import TypeVar, Generic, List, Sequence
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

    class Config:
        from_attributes = True


def create_paginated_response(
    items: List[T],
    total: int,
    page: int,
    limit: int
) -> dict:
    """
    Create a paginated response dictionary.

    Args:
        items: List of items for current page
        total: Total count of all items
        page: Current page number
        limit: Items per page

    Returns:
        Dictionary with pagination metadata
    """
    pages = (total + limit - 1) // limit if limit > 0 else 0

    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "pages": pages,
        "has_next": page < pages,
        "has_prev": page > 1
    }


def paginate(items: Sequence[T], page: int = 1, limit: int = 20) -> dict:
    """
    Paginate an already scoped, already ordered sequence.

    Visibility is resolved before paging, so pages are cut in memory.
    """
    offset = (page - 1) * limit
    return create_paginated_response(list(items[offset:offset + limit]), len(items), page, limit)
