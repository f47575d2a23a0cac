"""
HRMS - Employee Schemas

Pydantic schemas for employee management, including the segmented
(basic / personal / family / bank) update payloads.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.employee import (
    EmployeeStatus,
    Gender,
    IdentificationType,
    MaritalStatus,
    Organization,
)


STAFF_ID_PATTERN = r"^[A-Za-z0-9-]+$"
BANK_ACCOUNT_PATTERN = r"^[0-9\-\s]*$"


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class EmployeeLanguageItem(BaseModel):
    language: str = Field(..., min_length=1, max_length=100)
    proficiency_level: Optional[str] = Field(None, max_length=50)


class EmployeeBasicFields(BaseModel):
    """Identity and demographic fields."""
    organization: Optional[Organization] = None
    staff_id: Optional[str] = Field(None, min_length=3, max_length=50, pattern=STAFF_ID_PATTERN)
    initial_en: Optional[str] = Field(None, max_length=10)
    initial_th: Optional[str] = Field(None, max_length=20)
    first_name_en: Optional[str] = Field(None, min_length=2, max_length=255)
    last_name_en: Optional[str] = Field(None, max_length=255)
    first_name_th: Optional[str] = Field(None, max_length=255)
    last_name_th: Optional[str] = Field(None, max_length=255)
    gender: Optional[Gender] = None
    date_of_birth: Optional[date] = None
    status: Optional[EmployeeStatus] = None

    class Config:
        use_enum_values = True


class EmployeePersonalFields(BaseModel):
    """Contact, identification and demographic detail fields."""
    mobile_phone: Optional[str] = Field(None, max_length=50)
    nationality: Optional[str] = Field(None, max_length=100)
    religion: Optional[str] = Field(None, max_length=100)
    current_address: Optional[str] = None
    permanent_address: Optional[str] = None
    military_status: Optional[bool] = None
    identification_type: Optional[IdentificationType] = None
    identification_number: Optional[str] = Field(None, max_length=100)
    identification_issue_date: Optional[date] = None
    identification_expiry_date: Optional[date] = None
    social_security_number: Optional[str] = Field(None, max_length=50)
    tax_number: Optional[str] = Field(None, max_length=50)
    driver_license_number: Optional[str] = Field(None, max_length=100)

    class Config:
        use_enum_values = True


class EmployeeFamilyFields(BaseModel):
    """Marital status, spouse, emergency contact and parents."""
    marital_status: Optional[MaritalStatus] = None
    spouse_name: Optional[str] = Field(None, max_length=255)
    spouse_phone_number: Optional[str] = Field(None, max_length=50)
    emergency_contact_person_name: Optional[str] = Field(None, max_length=255)
    emergency_contact_person_relationship: Optional[str] = Field(None, max_length=100)
    emergency_contact_person_phone: Optional[str] = Field(None, max_length=50)
    father_name: Optional[str] = Field(None, max_length=255)
    father_occupation: Optional[str] = Field(None, max_length=255)
    father_phone_number: Optional[str] = Field(None, max_length=50)
    mother_name: Optional[str] = Field(None, max_length=255)
    mother_occupation: Optional[str] = Field(None, max_length=255)
    mother_phone_number: Optional[str] = Field(None, max_length=50)

    class Config:
        use_enum_values = True


class EmployeeBankFields(BaseModel):
    bank_name: Optional[str] = Field(None, max_length=100)
    bank_branch: Optional[str] = Field(None, max_length=100)
    bank_account_name: Optional[str] = Field(None, max_length=100)
    bank_account_number: Optional[str] = Field(None, max_length=100, pattern=BANK_ACCOUNT_PATTERN)


class EmployeeCreateRequest(
    EmployeeBasicFields,
    EmployeePersonalFields,
    EmployeeFamilyFields,
    EmployeeBankFields,
):
    """Schema for creating an employee."""
    organization: Organization
    staff_id: str = Field(..., min_length=3, max_length=50, pattern=STAFF_ID_PATTERN)
    remark: Optional[str] = None

    class Config:
        use_enum_values = True


class EmployeeUpdateRequest(
    EmployeeBasicFields,
    EmployeePersonalFields,
    EmployeeFamilyFields,
    EmployeeBankFields,
):
    """Schema for a full (partial-field) employee update."""
    remark: Optional[str] = None

    class Config:
        use_enum_values = True


class EmployeeBasicInformationRequest(EmployeeBasicFields):
    pass


class EmployeePersonalInformationRequest(EmployeePersonalFields):
    current_address: str = Field(..., min_length=1)
    permanent_address: str = Field(..., min_length=1)
    languages: Optional[List[EmployeeLanguageItem]] = None


class EmployeeFamilyInformationRequest(EmployeeFamilyFields):
    pass


class EmployeeBankInformationRequest(EmployeeBankFields):
    pass


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class EmployeeResponse(BaseModel):
    """Schema for employee response."""
    id: int
    organization: str
    staff_id: str
    initial_en: Optional[str] = None
    initial_th: Optional[str] = None
    first_name_en: Optional[str] = None
    last_name_en: Optional[str] = None
    first_name_th: Optional[str] = None
    last_name_th: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    status: Optional[str] = None
    nationality: Optional[str] = None
    religion: Optional[str] = None

    identification_type: Optional[str] = None
    identification_number: Optional[str] = None
    identification_issue_date: Optional[date] = None
    identification_expiry_date: Optional[date] = None
    social_security_number: Optional[str] = None
    tax_number: Optional[str] = None
    driver_license_number: Optional[str] = None

    bank_name: Optional[str] = None
    bank_branch: Optional[str] = None
    bank_account_name: Optional[str] = None
    bank_account_number: Optional[str] = None

    mobile_phone: Optional[str] = None
    current_address: Optional[str] = None
    permanent_address: Optional[str] = None
    military_status: Optional[bool] = None

    marital_status: Optional[str] = None
    spouse_name: Optional[str] = None
    spouse_phone_number: Optional[str] = None
    emergency_contact_person_name: Optional[str] = None
    emergency_contact_person_relationship: Optional[str] = None
    emergency_contact_person_phone: Optional[str] = None
    father_name: Optional[str] = None
    father_occupation: Optional[str] = None
    father_phone_number: Optional[str] = None
    mother_name: Optional[str] = None
    mother_occupation: Optional[str] = None
    mother_phone_number: Optional[str] = None

    remark: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EmployeeListItem(BaseModel):
    """Compact employee row for list endpoints."""
    id: int
    organization: str
    staff_id: str
    initial_en: Optional[str] = None
    first_name_en: Optional[str] = None
    last_name_en: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    status: Optional[str] = None
    mobile_phone: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class EmployeeChildSummary(BaseModel):
    id: int
    name: str
    date_of_birth: Optional[date] = None

    class Config:
        from_attributes = True


class EmployeeEducationSummary(BaseModel):
    id: int
    school_name: str
    degree: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    class Config:
        from_attributes = True


class EmployeeLanguageSummary(BaseModel):
    id: int
    language: str
    proficiency_level: Optional[str] = None

    class Config:
        from_attributes = True


class EmployeeBeneficiarySummary(BaseModel):
    id: int
    beneficiary_name: str
    beneficiary_relationship: str
    phone_number: Optional[str] = None

    class Config:
        from_attributes = True


class EmploymentSummary(BaseModel):
    id: int
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    employment_type: str
    start_date: date
    end_date: Optional[date] = None
    position_salary: Decimal
    active: bool

    class Config:
        from_attributes = True


class EmployeeDetailResponse(EmployeeResponse):
    """Employee with owned records."""
    employments: List[EmploymentSummary] = []
    children: List[EmployeeChildSummary] = []
    education: List[EmployeeEducationSummary] = []
    languages: List[EmployeeLanguageSummary] = []
    beneficiaries: List[EmployeeBeneficiarySummary] = []


class EmployeeStatistics(BaseModel):
    total: int
    by_organization: dict
    by_status: dict
    by_gender: dict

