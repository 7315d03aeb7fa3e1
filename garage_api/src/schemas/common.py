from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from src.services.pagination import PagedList

T = TypeVar("T")


class MessageResponse(BaseModel):
    """Plain message body (health probe)."""
    message: str = Field(..., description="Human readable message")


# PUBLIC_INTERFACE
class PagedResponse(BaseModel, Generic[T]):
    """One page of results with navigation metadata."""
    items: List[T] = Field(default_factory=list, description="Items of the requested page")
    page: int = Field(..., description="1-based page number")
    page_size: int = Field(..., description="Requested page size")
    total_count: int = Field(..., description="Total number of matching items")
    has_next_page: bool = Field(..., description="Whether a further page exists")
    has_previous_page: bool = Field(..., description="Whether page > 1")

    @classmethod
    def from_paged(cls, paged: PagedList, mapper: Callable[[Any], T]) -> "PagedResponse[T]":
        mapped = paged.map(mapper)
        return cls(
            items=mapped.items,
            page=mapped.page,
            page_size=mapped.page_size,
            total_count=mapped.total_count,
            has_next_page=mapped.has_next_page,
            has_previous_page=mapped.has_previous_page,
        )


class ErrorInfo(BaseModel):
    """Structured error description."""
    type: str = Field(..., description="Machine-readable error type code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(default=None, description="Optional error details (e.g., validation issues)")


# PUBLIC_INTERFACE
class ErrorResponse(BaseModel):
    """Standardized API error envelope returned by exception handlers."""
    status: int = Field(..., description="HTTP status code")
    error: ErrorInfo = Field(..., description="Error details")
    correlation_id: Optional[str] = Field(default=None, description="Request correlation ID")
    path: Optional[str] = Field(default=None, description="Request path")
    method: Optional[str] = Field(default=None, description="HTTP method")
    timestamp: datetime = Field(..., description="Error timestamp (UTC)")
