"""
HRMS - Leave Schemas

Leave types and per-employee leave balances.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, Field, PlainSerializer


MIN_BALANCE_YEAR = 2020
MAX_BALANCE_YEAR = 2030

# Day counts are stored as NUMERIC but returned as JSON numbers
Days = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# ===========================================
# LEAVE TYPES
# ===========================================

class LeaveTypeCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    default_duration: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    requires_attachment: bool = False


class LeaveTypeUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    default_duration: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    requires_attachment: Optional[bool] = None


class LeaveTypeResponse(BaseModel):
    id: int
    name: str
    default_duration: Optional[Days] = None
    description: Optional[str] = None
    requires_attachment: bool
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeaveTypeCreateResult(LeaveTypeResponse):
    balances_created: int = 0


# ===========================================
# LEAVE BALANCES
# ===========================================

class LeaveBalanceCreateRequest(BaseModel):
    employee_id: int = Field(..., ge=1)
    leave_type_id: int = Field(..., ge=1)
    total_days: Decimal = Field(..., ge=0)
    year: Optional[int] = Field(None, ge=MIN_BALANCE_YEAR, le=MAX_BALANCE_YEAR)


class LeaveBalanceUpdateRequest(BaseModel):
    total_days: Optional[Decimal] = Field(None, ge=0)
    used_days: Optional[Decimal] = Field(None, ge=0)


class LeaveBalanceItem(BaseModel):
    """Flattened balance row with employee and leave type names."""
    id: int
    employee_id: int
    staff_id: Optional[str] = None
    employee_name: Optional[str] = None
    leave_type_id: int
    leave_type_name: Optional[str] = None
    total_days: Days
    used_days: Days
    remaining_days: Days
    year: int
