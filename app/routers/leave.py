"""
HRMS - Leave Router

API endpoints for leave types and leave balances.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_request_context
from app.schemas.common import ApiResponse, FiltersEcho, MessageResponse, OptionItem, PaginatedResponse
from app.schemas.leave import (
    MAX_BALANCE_YEAR,
    MIN_BALANCE_YEAR,
    LeaveBalanceCreateRequest,
    LeaveBalanceItem,
    LeaveBalanceUpdateRequest,
    LeaveTypeCreateRequest,
    LeaveTypeCreateResult,
    LeaveTypeResponse,
    LeaveTypeUpdateRequest,
)
from app.services.context import RequestContext
from app.services.leave_service import LeaveBalanceService, LeaveTypeService
from app.utils.pagination import applied_filters, clamp_per_page


router = APIRouter()


# ===========================================
# LEAVE TYPES
# ===========================================

@router.get("/leave-types/options", response_model=ApiResponse[List[OptionItem]], summary="Leave type options")
async def leave_type_options(
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    leave_types = await LeaveTypeService(db, context).get_options()
    return ApiResponse[List[OptionItem]](
        message="Leave type options retrieved successfully",
        data=[OptionItem(id=t.id, name=t.name) for t in leave_types],
    )


@router.get("/leave-types", response_model=PaginatedResponse[LeaveTypeResponse], summary="List leave types")
async def list_leave_types(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    search: Optional[str] = Query(None),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    per_page = clamp_per_page(per_page)
    leave_types, pagination = await LeaveTypeService(db, context).list_leave_types(page, per_page, search)
    return PaginatedResponse[LeaveTypeResponse](
        message="Leave types retrieved successfully",
        data=[LeaveTypeResponse.model_validate(t) for t in leave_types],
        pagination=pagination,
        filters=FiltersEcho(applied_filters=applied_filters(search=search)),
    )


@router.get("/leave-types/{leave_type_id}", response_model=ApiResponse[LeaveTypeResponse], summary="Get leave type")
async def get_leave_type(
    leave_type_id: int,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    leave_type = await LeaveTypeService(db, context).get_leave_type(leave_type_id)
    return ApiResponse[LeaveTypeResponse](
        message="Leave type retrieved successfully",
        data=LeaveTypeResponse.model_validate(leave_type),
    )


@router.post(
    "/leave-types",
    response_model=ApiResponse[LeaveTypeCreateResult],
    status_code=status.HTTP_201_CREATED,
    summary="Create leave type",
    description="Create a leave type and a current-year balance for every employee.",
)
async def create_leave_type(
    request: LeaveTypeCreateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    leave_type, balances_created = await LeaveTypeService(db, context).create_leave_type(request.model_dump())
    return ApiResponse[LeaveTypeCreateResult](
        message=f"Leave type created successfully and applied to {balances_created} employee(s)",
        data=LeaveTypeCreateResult(
            **LeaveTypeResponse.model_validate(leave_type).model_dump(),
            balances_created=balances_created,
        ),
    )


@router.put("/leave-types/{leave_type_id}", response_model=ApiResponse[LeaveTypeResponse], summary="Update leave type")
async def update_leave_type(
    leave_type_id: int,
    request: LeaveTypeUpdateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    leave_type = await LeaveTypeService(db, context).update_leave_type(
        leave_type_id, request.model_dump(exclude_unset=True)
    )
    return ApiResponse[LeaveTypeResponse](
        message="Leave type updated successfully",
        data=LeaveTypeResponse.model_validate(leave_type),
    )


@router.delete("/leave-types/{leave_type_id}", response_model=MessageResponse, summary="Delete leave type")
async def delete_leave_type(
    leave_type_id: int,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    await LeaveTypeService(db, context).delete_leave_type(leave_type_id)
    return MessageResponse(message="Leave type deleted successfully")


# ===========================================
# LEAVE BALANCES
# ===========================================

@router.get("/leave-balances", response_model=PaginatedResponse[LeaveBalanceItem], summary="List leave balances")
async def list_leave_balances(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    employee_id: Optional[int] = Query(None, ge=1),
    leave_type_id: Optional[int] = Query(None, ge=1),
    year: Optional[int] = Query(None, ge=MIN_BALANCE_YEAR, le=MAX_BALANCE_YEAR),
    search: Optional[str] = Query(None, description="Staff ID or employee name"),
    sort_by: str = Query(
        "created_at",
        pattern="^(employee_name|staff_id|leave_type|total_days|used_days|remaining_days|year|created_at)$",
    ),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    per_page = clamp_per_page(per_page)
    year = year or date.today().year
    items, pagination = await LeaveBalanceService(db, context).list_balances(
        page=page,
        per_page=per_page,
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        year=year,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return PaginatedResponse[LeaveBalanceItem](
        message="Leave balances retrieved successfully",
        data=[LeaveBalanceItem(**item) for item in items],
        pagination=pagination,
        filters=FiltersEcho(
            applied_filters=applied_filters(
                employee_id=employee_id,
                leave_type_id=leave_type_id,
                year=year,
                search=search,
            )
        ),
    )


@router.get(
    "/leave-balances/{employee_id}/{leave_type_id}",
    response_model=ApiResponse[LeaveBalanceItem],
    summary="Get leave balance",
)
async def get_leave_balance(
    employee_id: int,
    leave_type_id: int,
    year: Optional[int] = Query(None, ge=MIN_BALANCE_YEAR, le=MAX_BALANCE_YEAR),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    item = await LeaveBalanceService(db, context).get_balance(employee_id, leave_type_id, year)
    return ApiResponse[LeaveBalanceItem](
        message="Leave balance retrieved successfully",
        data=LeaveBalanceItem(**item),
    )


@router.post(
    "/leave-balances",
    response_model=ApiResponse[LeaveBalanceItem],
    status_code=status.HTTP_201_CREATED,
    summary="Create leave balance",
)
async def create_leave_balance(
    request: LeaveBalanceCreateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    item = await LeaveBalanceService(db, context).create_balance(request.model_dump())
    return ApiResponse[LeaveBalanceItem](
        message="Leave balance created successfully",
        data=LeaveBalanceItem(**item),
    )


@router.put("/leave-balances/{balance_id}", response_model=ApiResponse[LeaveBalanceItem], summary="Update leave balance")
async def update_leave_balance(
    balance_id: int,
    request: LeaveBalanceUpdateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    item = await LeaveBalanceService(db, context).update_balance(
        balance_id, request.model_dump(exclude_unset=True)
    )
    return ApiResponse[LeaveBalanceItem](
        message="Leave balance updated successfully",
        data=LeaveBalanceItem(**item),
    )
