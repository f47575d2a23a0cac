"""
HRMS - Common Schemas

Response envelopes shared by every router.
"""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field


T = TypeVar("T")


class PaginationMeta(BaseModel):
    """Pagination block returned with list responses."""
    current_page: int
    per_page: int
    total: int
    last_page: int
    from_: Optional[int] = Field(None, alias="from")
    to: Optional[int] = None
    has_more_pages: bool

    class Config:
        populate_by_name = True


class FiltersEcho(BaseModel):
    applied_filters: Dict[str, Any] = {}


class ApiResponse(BaseModel, Generic[T]):
    """Standard {success, message, data} envelope."""
    success: bool = True
    message: str = ""
    data: Optional[T] = None


class PaginatedResponse(BaseModel, Generic[T]):
    """List envelope with pagination and the applied filter echo."""
    success: bool = True
    message: str = ""
    data: List[T]
    pagination: PaginationMeta
    filters: FiltersEcho = FiltersEcho()


class MessageResponse(BaseModel):
    """Generic message response."""
    success: bool = True
    message: str


class IdsRequest(BaseModel):
    """Batch operation over a list of ids."""
    ids: List[int] = Field(..., min_length=1)
    reason: Optional[str] = Field(None, max_length=1000)


class BatchFailure(BaseModel):
    id: Any
    blockers: List[str]


class OptionItem(BaseModel):
    id: int
    name: str
