"""
HRMS - Notification Model

Model for storing user notifications.

Notifications are produced by the notification subscriber from domain
events emitted by mutating services (employee created, department moved
to recycle bin, import completed, ...).
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel
from app.models.recycle_bin import JSONType

if TYPE_CHECKING:
    from app.models.user import User


class NotificationType(str, Enum):
    """Module that produced the notification."""
    EMPLOYEE = "employee"
    EMPLOYMENT = "employment"
    DEPARTMENT = "department"
    POSITION = "position"
    LEAVE = "leave"
    LOOKUP = "lookup"
    IMPORT = "import"
    RECYCLE_BIN = "recycle_bin"
    INFO = "info"


class Notification(BaseModel):
    """In-app notification for a user."""

    __tablename__ = "notifications"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    notification_type: Mapped[str] = mapped_column(
        String(50), default=NotificationType.INFO.value, nullable=False,
    )
    action: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    entity_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    entity_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    payload: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="notifications")
