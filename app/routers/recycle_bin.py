"""
HRMS - Recycle Bin Router

Browse, restore and permanently delete safe-deleted records.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_request_context
from app.schemas.common import ApiResponse, FiltersEcho, MessageResponse, PaginatedResponse
from app.schemas.recycle_bin import (
    BulkRestoreRequest,
    BulkRestoreResult,
    DeletionManifestResponse,
    RecycleBinStats,
    RestoreRequest,
    RestoreResult,
)
from app.services.context import RequestContext
from app.services.recycle_bin_service import RecycleBinService
from app.services.safe_delete_service import SafeDeleteService
from app.utils.pagination import applied_filters, clamp_per_page


router = APIRouter()


@router.get("/recycle-bin", response_model=PaginatedResponse[DeletionManifestResponse], summary="List recycle bin entries")
async def list_recycle_bin(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    model: Optional[str] = Query(None, description="Root table name, e.g. employees"),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    per_page = clamp_per_page(per_page)
    entries, pagination = await RecycleBinService(db, context).list_entries(page, per_page, model)
    return PaginatedResponse[DeletionManifestResponse](
        message="Recycle bin entries retrieved successfully",
        data=[DeletionManifestResponse.model_validate(e) for e in entries],
        pagination=pagination,
        filters=FiltersEcho(applied_filters=applied_filters(model=model)),
    )


@router.get("/recycle-bin/stats", response_model=ApiResponse[RecycleBinStats], summary="Recycle bin statistics")
async def recycle_bin_stats(
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    stats = await RecycleBinService(db, context).get_stats()
    return ApiResponse[RecycleBinStats](
        message="Recycle bin statistics retrieved successfully",
        data=RecycleBinStats(**stats),
    )


@router.post("/recycle-bin/restore", response_model=ApiResponse[RestoreResult], summary="Restore a deleted record")
async def restore(
    request: RestoreRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    result = await SafeDeleteService(db, context).restore(request.deletion_key)
    return ApiResponse[RestoreResult](
        message=f"{result['display_name'] or result['root_model']} restored successfully",
        data=RestoreResult(**result),
    )


@router.post("/recycle-bin/bulk-restore", response_model=ApiResponse[BulkRestoreResult], summary="Restore several records")
async def bulk_restore(
    request: BulkRestoreRequest,
    response: Response,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    result = await SafeDeleteService(db, context).bulk_restore(request.deletion_keys)
    succeeded, failed = len(result["succeeded"]), len(result["failed"])
    if failed:
        response.status_code = status.HTTP_207_MULTI_STATUS
    return ApiResponse[BulkRestoreResult](
        success=failed == 0,
        message=f"{succeeded} restored, {failed} failed",
        data=BulkRestoreResult(**result),
    )


@router.delete("/recycle-bin/{deletion_key}", response_model=MessageResponse, summary="Permanently delete an entry")
async def permanently_delete(
    deletion_key: str,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    count = await SafeDeleteService(db, context).permanently_delete(deletion_key)
    return MessageResponse(message=f"Recycle bin entry permanently deleted ({count} records)")
