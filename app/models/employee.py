"""
HRMS - Employee Models

Employee master record plus the small per-employee child tables
(children, education, languages, beneficiaries).

Staff IDs are unique per organization, not globally: SMRU and BHF keep
independent staff numbering.
"""

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Date, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, BaseModel

if TYPE_CHECKING:
    from app.models.employment import Employment
    from app.models.funding_allocation import EmployeeFundingAllocation
    from app.models.leave import LeaveBalance


class Organization(str, Enum):
    """Organizations that employ staff."""
    SMRU = "SMRU"
    BHF = "BHF"


class Gender(str, Enum):
    MALE = "M"
    FEMALE = "F"


class EmployeeStatus(str, Enum):
    """Staff category."""
    EXPATS_LOCAL = "Expats (Local)"
    LOCAL_ID_STAFF = "Local ID Staff"
    LOCAL_NON_ID_STAFF = "Local non ID Staff"


class MaritalStatus(str, Enum):
    SINGLE = "Single"
    MARRIED = "Married"
    DIVORCED = "Divorced"
    WIDOWED = "Widowed"


class IdentificationType(str, Enum):
    """Stored identification document types."""
    TEN_YEARS_ID = "10YearsID"
    BURMESE_ID = "BurmeseID"
    CI = "CI"
    BORDERPASS = "Borderpass"
    THAI_ID = "ThaiID"
    PASSPORT = "Passport"
    OTHER = "Other"


# Spreadsheet display labels for identification types
IDENTIFICATION_TYPE_LABELS = {
    IdentificationType.TEN_YEARS_ID: "10 years ID",
    IdentificationType.BURMESE_ID: "Burmese ID",
    IdentificationType.CI: "CI",
    IdentificationType.BORDERPASS: "Borderpass",
    IdentificationType.THAI_ID: "Thai ID",
    IdentificationType.PASSPORT: "Passport",
    IdentificationType.OTHER: "Other",
}


class Employee(BaseModel, AuditMixin):
    """Employee master record."""

    __tablename__ = "employees"
    __table_args__ = (
        UniqueConstraint("organization", "staff_id", name="uq_employees_organization_staff_id"),
    )

    # ===========================================
    # IDENTITY
    # ===========================================
    organization: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    staff_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    initial_en: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    initial_th: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    first_name_en: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_name_en: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    first_name_th: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_name_th: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ===========================================
    # DEMOGRAPHICS
    # ===========================================
    gender: Mapped[Optional[str]] = mapped_column(String(1), nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    nationality: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    religion: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # ===========================================
    # IDENTIFICATION
    # ===========================================
    identification_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    identification_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    identification_issue_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    identification_expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    social_security_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    tax_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    driver_license_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # ===========================================
    # BANK
    # ===========================================
    bank_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    bank_branch: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    bank_account_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    bank_account_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # ===========================================
    # CONTACT
    # ===========================================
    mobile_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    current_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    permanent_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    military_status: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    # ===========================================
    # FAMILY
    # ===========================================
    marital_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    spouse_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    spouse_phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    emergency_contact_person_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    emergency_contact_person_relationship: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    emergency_contact_person_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    father_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    father_occupation: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    father_phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    mother_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    mother_occupation: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    mother_phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    remark: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships (children are removed explicitly by the safe-delete service)
    employments: Mapped[List["Employment"]] = relationship(
        "Employment", back_populates="employee", passive_deletes=True,
    )
    children: Mapped[List["EmployeeChild"]] = relationship(
        "EmployeeChild", back_populates="employee", passive_deletes=True,
    )
    education: Mapped[List["EmployeeEducation"]] = relationship(
        "EmployeeEducation", back_populates="employee", passive_deletes=True,
    )
    languages: Mapped[List["EmployeeLanguage"]] = relationship(
        "EmployeeLanguage", back_populates="employee", passive_deletes=True,
    )
    beneficiaries: Mapped[List["EmployeeBeneficiary"]] = relationship(
        "EmployeeBeneficiary", back_populates="employee", passive_deletes=True,
    )
    funding_allocations: Mapped[List["EmployeeFundingAllocation"]] = relationship(
        "EmployeeFundingAllocation", back_populates="employee", passive_deletes=True,
    )
    leave_balances: Mapped[List["LeaveBalance"]] = relationship(
        "LeaveBalance", back_populates="employee", passive_deletes=True,
    )

    @property
    def full_name_en(self) -> str:
        """English display name."""
        return " ".join(p for p in [self.first_name_en, self.last_name_en] if p)

    @property
    def display_name(self) -> str:
        """Name used in notifications and the recycle bin."""
        name = self.full_name_en or " ".join(
            p for p in [self.first_name_th, self.last_name_th] if p
        )
        return f"{name} ({self.staff_id})" if name else self.staff_id


class EmployeeChild(BaseModel, AuditMixin):
    __tablename__ = "employee_children"

    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="children")


class EmployeeEducation(BaseModel, AuditMixin):
    __tablename__ = "employee_education"

    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), nullable=False, index=True)
    school_name: Mapped[str] = mapped_column(String(255), nullable=False)
    degree: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="education")


class EmployeeLanguage(BaseModel, AuditMixin):
    __tablename__ = "employee_languages"

    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), nullable=False, index=True)
    language: Mapped[str] = mapped_column(String(100), nullable=False)
    proficiency_level: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="languages")


class EmployeeBeneficiary(BaseModel, AuditMixin):
    """Next of kin / beneficiary."""

    __tablename__ = "employee_beneficiaries"

    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), nullable=False, index=True)
    beneficiary_name: Mapped[str] = mapped_column(String(255), nullable=False)
    beneficiary_relationship: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="beneficiaries")
