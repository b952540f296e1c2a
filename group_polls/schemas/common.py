"""
Common schemas shared across the API.
"""

from typing import TypeVar, Generic, List
from pydantic import BaseModel, Field, ConfigDict


# Generic type for paginated responses
T = TypeVar('T')


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a listing plus the metadata needed to fetch the next one"""
    items: List[T] = Field(..., description="Items on the current page")
    total: int = Field(..., description="Total number of items across all pages")
    page: int = Field(..., description="Current page number")
    size: int = Field(..., description="Items per page")
    pages: int = Field(..., description="Total number of pages")
    has_next: bool = Field(..., description="Whether a later page exists")
    has_prev: bool = Field(..., description="Whether an earlier page exists")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": [],
                "total": 12,
                "page": 1,
                "size": 10,
                "pages": 2,
                "has_next": True,
                "has_prev": False
            }
        }
    )
