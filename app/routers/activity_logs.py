"""
HRMS - Activity Logs Router

Read-only audit trail of safe deletes, restores and permanent deletes.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_current_active_user
from app.models.activity_log import ActivityLog
from app.models.user import User
from app.schemas.common import FiltersEcho, PaginatedResponse
from app.utils.pagination import applied_filters, clamp_per_page, paginate


router = APIRouter(prefix="/activity-logs", tags=["Activity Logs"])


class ActivityLogResponse(BaseModel):
    id: int
    action: str
    subject_type: str
    subject_id: Optional[int] = None
    description: Optional[str] = None
    causer_id: Optional[int] = None
    causer_name: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True


@router.get("", response_model=PaginatedResponse[ActivityLogResponse], summary="List activity logs")
async def list_activity_logs(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    subject_type: Optional[str] = Query(None, description="Table name, e.g. employees"),
    action: Optional[str] = Query(None, description="deleted, restored or permanently_deleted"),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    per_page = clamp_per_page(per_page)
    query = select(ActivityLog)
    if subject_type:
        query = query.where(ActivityLog.subject_type == subject_type)
    if action:
        query = query.where(ActivityLog.action == action)
    query = query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())

    logs, pagination = await paginate(db, query, page, per_page)
    return PaginatedResponse[ActivityLogResponse](
        message="Activity logs retrieved successfully",
        data=[ActivityLogResponse.model_validate(log) for log in logs],
        pagination=pagination,
        filters=FiltersEcho(applied_filters=applied_filters(subject_type=subject_type, action=action)),
    )
