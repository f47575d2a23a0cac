"""
HRMS - Employee Record Schemas

Schemas for the small records owned by an employee: children, education,
languages, beneficiaries and funding allocations.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from app.models.funding_allocation import AllocationType


class _EmployeeOwned(BaseModel):
    employee_id: int = Field(..., ge=1)


class _RecordResponse(BaseModel):
    id: int
    employee_id: int
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


def _check_date_range(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValueError("end_date must be on or after start_date")


# ===========================================
# CHILDREN
# ===========================================

class EmployeeChildCreateRequest(_EmployeeOwned):
    name: str = Field(..., min_length=1, max_length=255)
    date_of_birth: Optional[date] = None


class EmployeeChildUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    date_of_birth: Optional[date] = None


class EmployeeChildResponse(_RecordResponse):
    name: str
    date_of_birth: Optional[date] = None


# ===========================================
# EDUCATION
# ===========================================

class EmployeeEducationCreateRequest(_EmployeeOwned):
    school_name: str = Field(..., min_length=1, max_length=255)
    degree: str = Field(..., min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self):
        _check_date_range(self.start_date, self.end_date)
        return self


class EmployeeEducationUpdateRequest(BaseModel):
    school_name: Optional[str] = Field(None, min_length=1, max_length=255)
    degree: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self):
        _check_date_range(self.start_date, self.end_date)
        return self


class EmployeeEducationResponse(_RecordResponse):
    school_name: str
    degree: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None


# ===========================================
# LANGUAGES
# ===========================================

class EmployeeLanguageCreateRequest(_EmployeeOwned):
    language: str = Field(..., min_length=1, max_length=100)
    proficiency_level: Optional[str] = Field(None, max_length=50)


class EmployeeLanguageUpdateRequest(BaseModel):
    language: Optional[str] = Field(None, min_length=1, max_length=100)
    proficiency_level: Optional[str] = Field(None, max_length=50)


class EmployeeLanguageResponse(_RecordResponse):
    language: str
    proficiency_level: Optional[str] = None


# ===========================================
# BENEFICIARIES
# ===========================================

class EmployeeBeneficiaryCreateRequest(_EmployeeOwned):
    beneficiary_name: str = Field(..., min_length=1, max_length=255)
    beneficiary_relationship: str = Field(..., min_length=1, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=50)


class EmployeeBeneficiaryUpdateRequest(BaseModel):
    beneficiary_name: Optional[str] = Field(None, min_length=1, max_length=255)
    beneficiary_relationship: Optional[str] = Field(None, min_length=1, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=50)


class EmployeeBeneficiaryResponse(_RecordResponse):
    beneficiary_name: str
    beneficiary_relationship: str
    phone_number: Optional[str] = None


# ===========================================
# FUNDING ALLOCATIONS
# ===========================================

class FundingAllocationCreateRequest(_EmployeeOwned):
    employment_id: Optional[int] = None
    allocation_type: AllocationType
    fte: Decimal = Field(..., gt=0, le=1, description="Full-time equivalent fraction")
    allocated_amount: Optional[Decimal] = Field(None, ge=0)
    start_date: date
    end_date: Optional[date] = None

    class Config:
        use_enum_values = True

    @model_validator(mode="after")
    def check_dates(self):
        _check_date_range(self.start_date, self.end_date)
        return self


class FundingAllocationUpdateRequest(BaseModel):
    employment_id: Optional[int] = None
    allocation_type: Optional[AllocationType] = None
    fte: Optional[Decimal] = Field(None, gt=0, le=1)
    allocated_amount: Optional[Decimal] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    class Config:
        use_enum_values = True

    @model_validator(mode="after")
    def check_dates(self):
        _check_date_range(self.start_date, self.end_date)
        return self


class FundingAllocationResponse(_RecordResponse):
    employment_id: Optional[int] = None
    allocation_type: str
    fte: Decimal
    allocated_amount: Optional[Decimal] = None
    start_date: date
    end_date: Optional[date] = None
