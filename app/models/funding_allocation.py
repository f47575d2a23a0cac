"""
HRMS - Funding Allocation Model

Assignment of part of an employee's cost (as an FTE fraction) to a grant
or to organization funds for a date range.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, BaseModel

if TYPE_CHECKING:
    from app.models.employee import Employee


class AllocationType(str, Enum):
    GRANT = "grant"
    ORG_FUNDED = "org_funded"


class EmployeeFundingAllocation(BaseModel, AuditMixin):
    __tablename__ = "employee_funding_allocations"

    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), nullable=False, index=True)
    employment_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("employments.id"), nullable=True, index=True,
    )
    allocation_type: Mapped[str] = mapped_column(String(20), nullable=False)
    fte: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=False)
    allocated_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(15, 2), nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="funding_allocations")
