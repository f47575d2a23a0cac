"""
HRMS - Departments Router
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_request_context
from app.schemas.common import ApiResponse, FiltersEcho, OptionItem, PaginatedResponse
from app.schemas.organization_structure import (
    DepartmentCreateRequest,
    DepartmentDetailResponse,
    DepartmentListItem,
    DepartmentResponse,
    DepartmentUpdateRequest,
    PositionWithSupervisor,
)
from app.schemas.recycle_bin import SafeDeleteResponse
from app.services.context import RequestContext
from app.services.department_service import DepartmentService
from app.utils.pagination import applied_filters, clamp_per_page


router = APIRouter()


@router.get("/departments/options", response_model=ApiResponse[List[OptionItem]], summary="Department options")
async def department_options(
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    departments = await DepartmentService(db, context).get_options(search, is_active)
    return ApiResponse[List[OptionItem]](
        message="Department options retrieved successfully",
        data=[OptionItem(id=d.id, name=d.name) for d in departments],
    )


@router.get("/departments", response_model=PaginatedResponse[DepartmentListItem], summary="List departments")
async def list_departments(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    sort_by: str = Query("name", pattern="^(name|created_at|positions_count)$"),
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    per_page = clamp_per_page(per_page, default=20)
    items, pagination = await DepartmentService(db, context).list_departments(
        page=page,
        per_page=per_page,
        search=search,
        is_active=is_active,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return PaginatedResponse[DepartmentListItem](
        message="Departments retrieved successfully",
        data=[DepartmentListItem(**item) for item in items],
        pagination=pagination,
        filters=FiltersEcho(applied_filters=applied_filters(search=search, is_active=is_active)),
    )


@router.get("/departments/{department_id}", response_model=ApiResponse[DepartmentDetailResponse], summary="Get department")
async def get_department(
    department_id: int,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    service = DepartmentService(db, context)
    department = await service.get_department(department_id)
    positions = await service.get_positions(department_id, is_active=True)

    detail = DepartmentDetailResponse(
        **DepartmentResponse.model_validate(department).model_dump(),
        positions=[PositionWithSupervisor.model_validate(p) for p in positions],
    )
    return ApiResponse[DepartmentDetailResponse](
        message="Department retrieved successfully",
        data=detail,
    )


@router.get(
    "/departments/{department_id}/positions",
    response_model=ApiResponse[List[PositionWithSupervisor]],
    summary="Department positions",
)
async def department_positions(
    department_id: int,
    is_active: Optional[bool] = Query(None),
    is_manager: Optional[bool] = Query(None),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    positions = await DepartmentService(db, context).get_positions(department_id, is_active, is_manager)
    return ApiResponse[List[PositionWithSupervisor]](
        message="Department positions retrieved successfully",
        data=[PositionWithSupervisor.model_validate(p) for p in positions],
    )


@router.get(
    "/departments/{department_id}/managers",
    response_model=ApiResponse[List[PositionWithSupervisor]],
    summary="Department manager positions",
)
async def department_managers(
    department_id: int,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    positions = await DepartmentService(db, context).get_managers(department_id)
    return ApiResponse[List[PositionWithSupervisor]](
        message="Department managers retrieved successfully",
        data=[PositionWithSupervisor.model_validate(p) for p in positions],
    )


@router.post(
    "/departments",
    response_model=ApiResponse[DepartmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create department",
)
async def create_department(
    request: DepartmentCreateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    department = await DepartmentService(db, context).create_department(request.model_dump())
    return ApiResponse[DepartmentResponse](
        message="Department created successfully",
        data=DepartmentResponse.model_validate(department),
    )


@router.put("/departments/{department_id}", response_model=ApiResponse[DepartmentResponse], summary="Update department")
async def update_department(
    department_id: int,
    request: DepartmentUpdateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    department = await DepartmentService(db, context).update_department(
        department_id, request.model_dump(exclude_unset=True)
    )
    return ApiResponse[DepartmentResponse](
        message="Department updated successfully",
        data=DepartmentResponse.model_validate(department),
    )


@router.delete(
    "/departments/{department_id}",
    response_model=SafeDeleteResponse,
    summary="Delete department",
    description="Move the department and its positions to the recycle bin.",
)
async def delete_department(
    department_id: int,
    reason: Optional[str] = Query(None, max_length=1000),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    manifest = await DepartmentService(db, context).delete_department(department_id, reason)
    return SafeDeleteResponse(
        message="Department moved to recycle bin",
        deletion_key=manifest.deletion_key,
        deleted_records_count=manifest.snapshot_count,
    )
