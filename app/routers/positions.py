"""
HRMS - Positions Router
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_request_context
from app.schemas.common import ApiResponse, FiltersEcho, MessageResponse, OptionItem, PaginatedResponse
from app.schemas.organization_structure import (
    PositionCreateRequest,
    PositionDetailResponse,
    PositionListItem,
    PositionResponse,
    PositionSummary,
    PositionUpdateRequest,
)
from app.services.context import RequestContext
from app.services.position_service import PositionService
from app.utils.pagination import applied_filters, clamp_per_page


router = APIRouter()


@router.get("/positions/options", response_model=ApiResponse[List[OptionItem]], summary="Position options")
async def position_options(
    department_id: Optional[int] = Query(None, ge=1),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    positions = await PositionService(db, context).get_options(department_id)
    return ApiResponse[List[OptionItem]](
        message="Position options retrieved successfully",
        data=[OptionItem(id=p.id, name=p.title) for p in positions],
    )


@router.get("/positions", response_model=PaginatedResponse[PositionListItem], summary="List positions")
async def list_positions(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    department_id: Optional[int] = Query(None, ge=1),
    is_active: Optional[bool] = Query(None),
    is_manager: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    sort_by: str = Query("title", pattern="^(title|level|created_at|department_name)$"),
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    per_page = clamp_per_page(per_page)
    rows, pagination = await PositionService(db, context).list_positions(
        page=page,
        per_page=per_page,
        department_id=department_id,
        is_active=is_active,
        is_manager=is_manager,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    data = [
        PositionListItem(**PositionResponse.model_validate(position).model_dump(), department_name=department_name)
        for position, department_name in rows
    ]
    return PaginatedResponse[PositionListItem](
        message="Positions retrieved successfully",
        data=data,
        pagination=pagination,
        filters=FiltersEcho(
            applied_filters=applied_filters(
                department_id=department_id,
                is_active=is_active,
                is_manager=is_manager,
                search=search,
            )
        ),
    )


@router.get("/positions/{position_id}", response_model=ApiResponse[PositionDetailResponse], summary="Get position")
async def get_position(
    position_id: int,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    service = PositionService(db, context)
    position = await service.get_position(position_id, with_supervisor=True)
    detail = PositionDetailResponse(
        **PositionResponse.model_validate(position).model_dump(),
        reports_to=PositionSummary.model_validate(position.reports_to) if position.reports_to else None,
        department_name=position.department.name if position.department else None,
        direct_reports_count=await service.count_direct_reports(position_id),
    )
    return ApiResponse[PositionDetailResponse](
        message="Position retrieved successfully",
        data=detail,
    )


@router.get(
    "/positions/{position_id}/direct-reports",
    response_model=ApiResponse[List[PositionResponse]],
    summary="Direct reports",
)
async def direct_reports(
    position_id: int,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    positions = await PositionService(db, context).get_direct_reports(position_id)
    return ApiResponse[List[PositionResponse]](
        message="Direct reports retrieved successfully",
        data=[PositionResponse.model_validate(p) for p in positions],
    )


@router.post(
    "/positions",
    response_model=ApiResponse[PositionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create position",
)
async def create_position(
    request: PositionCreateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    position = await PositionService(db, context).create_position(request.model_dump())
    return ApiResponse[PositionResponse](
        message="Position created successfully",
        data=PositionResponse.model_validate(position),
    )


@router.put("/positions/{position_id}", response_model=ApiResponse[PositionResponse], summary="Update position")
async def update_position(
    position_id: int,
    request: PositionUpdateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    position = await PositionService(db, context).update_position(
        position_id, request.model_dump(exclude_unset=True)
    )
    return ApiResponse[PositionResponse](
        message="Position updated successfully",
        data=PositionResponse.model_validate(position),
    )


@router.delete("/positions/{position_id}", response_model=MessageResponse, summary="Delete position")
async def delete_position(
    position_id: int,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    await PositionService(db, context).delete_position(position_id)
    return MessageResponse(message="Position deleted successfully")
