"""
HRMS - Lookup Model

Generic (type, value) rows backing dropdown enumerations.
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import AuditMixin, BaseModel


class Lookup(BaseModel, AuditMixin):
    __tablename__ = "lookups"
    __table_args__ = (
        UniqueConstraint("type", "value", name="uq_lookups_type_value"),
    )

    type: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False)
