"""
HRMS - Department and Position Schemas
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ===========================================
# DEPARTMENTS
# ===========================================

class DepartmentCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: bool = True


class DepartmentUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class DepartmentResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_active: bool
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DepartmentListItem(DepartmentResponse):
    positions_count: int = 0
    active_positions_count: int = 0


# ===========================================
# POSITIONS
# ===========================================

class PositionCreateRequest(BaseModel):
    department_id: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=255)
    reports_to_id: Optional[int] = None
    level: int = Field(1, ge=1, le=10)
    is_manager: bool = False
    is_active: bool = True


class PositionUpdateRequest(BaseModel):
    department_id: Optional[int] = Field(None, ge=1)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    reports_to_id: Optional[int] = None
    level: Optional[int] = Field(None, ge=1, le=10)
    is_manager: Optional[bool] = None
    is_active: Optional[bool] = None


class PositionSummary(BaseModel):
    id: int
    title: str
    level: int
    is_manager: bool

    class Config:
        from_attributes = True


class PositionResponse(BaseModel):
    id: int
    department_id: int
    title: str
    reports_to_id: Optional[int] = None
    level: int
    is_manager: bool
    is_active: bool
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PositionWithSupervisor(PositionResponse):
    reports_to: Optional[PositionSummary] = None


class PositionDetailResponse(PositionWithSupervisor):
    department_name: Optional[str] = None
    direct_reports_count: int = 0


class PositionListItem(PositionResponse):
    department_name: Optional[str] = None


class DepartmentDetailResponse(DepartmentResponse):
    positions: List[PositionWithSupervisor] = []
