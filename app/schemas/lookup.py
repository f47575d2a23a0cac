"""
HRMS - Lookup Schemas
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class LookupCreateRequest(BaseModel):
    type: str = Field(..., min_length=1, max_length=255)
    value: str = Field(..., min_length=1, max_length=255)


class LookupUpdateRequest(BaseModel):
    type: Optional[str] = Field(None, min_length=1, max_length=255)
    value: Optional[str] = Field(None, min_length=1, max_length=255)


class LookupValue(BaseModel):
    id: int
    value: str

    class Config:
        from_attributes = True


class LookupResponse(BaseModel):
    id: int
    type: str
    value: str
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
