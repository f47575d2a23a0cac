"""
HRMS - Employment Models

Employment records, plus the payroll rows that reference them. Payroll
rows are written by the payroll system; this service only reads them.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, BaseModel

if TYPE_CHECKING:
    from app.models.employee import Employee
    from app.models.organization_structure import Department, Position


class EmploymentType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    TEMPORARY = "Temporary"


class PayMethod(str, Enum):
    MONTHLY = "Monthly"
    WEEKLY = "Weekly"
    DAILY = "Daily"
    HOURLY = "Hourly"


class Employment(BaseModel, AuditMixin):
    """Employment record. At most one active record per employee."""

    __tablename__ = "employments"

    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), nullable=False, index=True)
    department_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("departments.id"), nullable=True, index=True,
    )
    position_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("positions.id"), nullable=True, index=True,
    )
    employment_type: Mapped[str] = mapped_column(String(50), nullable=False)
    pay_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    probation_pass_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    position_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="employments")
    department: Mapped[Optional["Department"]] = relationship("Department")
    position: Mapped[Optional["Position"]] = relationship("Position")


class Payroll(BaseModel, AuditMixin):
    """Processed payroll line for an employee."""

    __tablename__ = "payrolls"

    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), nullable=False, index=True)
    employment_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("employments.id"), nullable=True,
    )
    pay_period_date: Mapped[date] = mapped_column(Date, nullable=False)
    gross_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
