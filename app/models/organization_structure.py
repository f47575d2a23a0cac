"""
HRMS - Organization Structure Models

Departments and the position tree inside each department.
"""

from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import AuditMixin, BaseModel


class Department(BaseModel, AuditMixin):
    """Organizational department."""

    __tablename__ = "departments"

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    positions: Mapped[List["Position"]] = relationship(
        "Position", back_populates="department", passive_deletes=True,
    )

    @property
    def display_name(self) -> str:
        return self.name


class Position(BaseModel, AuditMixin):
    """
    Position within a department.

    Positions form a reporting tree through reports_to_id. Level 1 is the
    top of a department and is always a manager position.
    """

    __tablename__ = "positions"

    department_id: Mapped[int] = mapped_column(
        ForeignKey("departments.id"), nullable=False, index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    reports_to_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("positions.id"), nullable=True, index=True,
    )
    level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    is_manager: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    department: Mapped["Department"] = relationship("Department", back_populates="positions")
    reports_to: Mapped[Optional["Position"]] = relationship(
        "Position", remote_side="Position.id", back_populates="direct_reports",
    )
    direct_reports: Mapped[List["Position"]] = relationship(
        "Position", back_populates="reports_to",
    )

    @property
    def display_name(self) -> str:
        return self.title
