"""
Pagination utilities for API endpoints.

Reusable pagination and search helpers so every listing endpoint pages the
same way.
"""

from typing import List, Optional, TypeVar, Any
from pydantic import BaseModel, Field
from fastapi import Query
from sqlalchemy import or_
from sqlalchemy.orm import Query as SQLQuery
import math

from group_polls.core.constants import DatabaseConfig
from group_polls.schemas.common import PaginatedResponse


T = TypeVar('T')


class PaginationParams(BaseModel):
    """Parameters for pagination"""
    page: int = Field(..., ge=1, description="Page number (starts from 1)")
    size: int = Field(..., ge=1, le=DatabaseConfig.MAX_PAGE_SIZE, description="Items per page")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(DatabaseConfig.DEFAULT_PAGE_SIZE, ge=1, le=DatabaseConfig.MAX_PAGE_SIZE, description="Items per page")
) -> PaginationParams:
    """FastAPI dependency for pagination parameters"""
    return PaginationParams(page=page, size=size)


def apply_search(query: SQLQuery, search_term: Optional[str], search_fields: List[Any]) -> SQLQuery:
    """Apply a case-insensitive OR search over the given model fields."""
    if not search_term or not search_fields:
        return query
    # % and _ in the term match literally
    escaped = search_term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return query.filter(or_(*[field.ilike(f"%{escaped}%", escape="\\") for field in search_fields]))


def paginate_query(
    query: SQLQuery,
    pagination: PaginationParams,
    search_term: Optional[str] = None,
    search_fields: Optional[List[Any]] = None
) -> tuple[List[Any], int]:
    """
    Complete pagination workflow for a query.

    Returns:
        Tuple of (items for the requested page, total count before paging)
    """
    if search_term and search_fields:
        query = apply_search(query, search_term, search_fields)

    total = query.count()
    items = query.offset(pagination.offset).limit(pagination.size).all()
    return items, total


def create_paginated_response(items: List[T], total: int, pagination: PaginationParams) -> PaginatedResponse[T]:
    """Wrap a page of already-serialized items with pagination metadata."""
    pages = math.ceil(total / pagination.size) if total > 0 else 1
    return PaginatedResponse(
        items=items,
        total=total,
        page=pagination.page,
        size=pagination.size,
        pages=pages,
        has_next=pagination.page < pages,
        has_prev=pagination.page > 1
    )
