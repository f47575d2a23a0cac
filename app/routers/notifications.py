"""
HRMS - Notifications Router

API endpoints for the current user's notification inbox.

Features:
- List notifications (optionally unread only)
- Mark as read (single/all)
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_current_active_user
from app.models.user import User
from app.schemas.common import ApiResponse, FiltersEcho, PaginatedResponse
from app.services.notification_service import NotificationService
from app.utils.pagination import applied_filters, clamp_per_page


router = APIRouter(prefix="/notifications", tags=["Notifications"])


# ===========================================
# REQUEST/RESPONSE SCHEMAS
# ===========================================

class NotificationResponse(BaseModel):
    """Schema for notification response."""
    id: int
    title: str
    message: str
    notification_type: str
    action: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[int] = None
    payload: Optional[Dict[str, Any]] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class MarkAllReadResult(BaseModel):
    count: int


# ===========================================
# ENDPOINTS
# ===========================================

@router.get("", response_model=PaginatedResponse[NotificationResponse], summary="List notifications")
async def list_notifications(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    per_page = clamp_per_page(per_page, default=20)
    notifications, pagination = await NotificationService(db).list_notifications(
        user_id=current_user.id,
        unread_only=unread_only,
        page=page,
        per_page=per_page,
    )
    return PaginatedResponse[NotificationResponse](
        message="Notifications retrieved successfully",
        data=[NotificationResponse.model_validate(n) for n in notifications],
        pagination=pagination,
        filters=FiltersEcho(applied_filters=applied_filters(unread_only=unread_only or None)),
    )


@router.put("/read-all", response_model=ApiResponse[MarkAllReadResult], summary="Mark all notifications as read")
async def mark_all_as_read(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    count = await NotificationService(db).mark_all_as_read(current_user.id)
    return ApiResponse[MarkAllReadResult](
        message=f"Marked {count} notifications as read",
        data=MarkAllReadResult(count=count),
    )


@router.put("/{notification_id}/read", response_model=ApiResponse[NotificationResponse], summary="Mark notification as read")
async def mark_as_read(
    notification_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    notification = await NotificationService(db).mark_as_read(notification_id, current_user.id)
    return ApiResponse[NotificationResponse](
        message="Notification marked as read",
        data=NotificationResponse.model_validate(notification),
    )
