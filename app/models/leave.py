"""
HRMS - Leave Models

Leave types and per-employee yearly leave balances.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, BaseModel

if TYPE_CHECKING:
    from app.models.employee import Employee


class LeaveType(BaseModel, AuditMixin):
    __tablename__ = "leave_types"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    default_duration: Mapped[Optional[Decimal]] = mapped_column(Numeric(8, 2), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    requires_attachment: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    balances: Mapped[List["LeaveBalance"]] = relationship(
        "LeaveBalance", back_populates="leave_type", passive_deletes=True,
    )


class LeaveBalance(BaseModel, AuditMixin):
    """
    Leave entitlement for one (employee, leave type, year).

    remaining_days is always total_days - used_days; it is stored for
    sorting and reporting and recomputed by the service on every write.
    """

    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint(
            "employee_id", "leave_type_id", "year",
            name="uq_leave_balances_employee_type_year",
        ),
    )

    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), nullable=False, index=True)
    leave_type_id: Mapped[int] = mapped_column(ForeignKey("leave_types.id"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    total_days: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=0, nullable=False)
    used_days: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=0, nullable=False)
    remaining_days: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=0, nullable=False)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="leave_balances")
    leave_type: Mapped["LeaveType"] = relationship("LeaveType", back_populates="balances")

    def recalculate(self) -> None:
        self.remaining_days = Decimal(self.total_days or 0) - Decimal(self.used_days or 0)
