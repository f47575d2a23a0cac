"""
HRMS - Activity Log Model

Audit trail for destructive operations (safe delete, restore, purge).
"""

from typing import Any, Dict, Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel
from app.models.recycle_bin import JSONType


class ActivityLog(BaseModel):
    __tablename__ = "activity_logs"

    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    subject_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    subject_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    causer_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    causer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    properties: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType, nullable=True)
