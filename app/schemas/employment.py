"""
HRMS - Employment Schemas
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from app.models.employment import EmploymentType, PayMethod


class EmploymentCreateRequest(BaseModel):
    employee_id: int = Field(..., ge=1)
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    employment_type: EmploymentType
    pay_method: Optional[PayMethod] = None
    start_date: date
    end_date: Optional[date] = None
    probation_pass_date: Optional[date] = None
    position_salary: Decimal = Field(..., ge=0)
    active: bool = True

    class Config:
        use_enum_values = True

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class EmploymentUpdateRequest(BaseModel):
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    employment_type: Optional[EmploymentType] = None
    pay_method: Optional[PayMethod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    probation_pass_date: Optional[date] = None
    position_salary: Optional[Decimal] = Field(None, ge=0)
    active: Optional[bool] = None

    class Config:
        use_enum_values = True


class EmploymentResponse(BaseModel):
    id: int
    employee_id: int
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    employment_type: str
    pay_method: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    probation_pass_date: Optional[date] = None
    position_salary: Decimal
    active: bool
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
