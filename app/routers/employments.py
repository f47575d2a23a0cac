"""
HRMS - Employments Router
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_request_context
from app.schemas.common import ApiResponse, FiltersEcho, MessageResponse, PaginatedResponse
from app.schemas.employment import (
    EmploymentCreateRequest,
    EmploymentResponse,
    EmploymentUpdateRequest,
)
from app.services.context import RequestContext
from app.services.employment_service import EmploymentService
from app.utils.pagination import applied_filters, clamp_per_page


router = APIRouter()


@router.get("/employments", response_model=PaginatedResponse[EmploymentResponse], summary="List employments")
async def list_employments(
    employee_id: Optional[int] = Query(None, ge=1),
    department_id: Optional[int] = Query(None, ge=1),
    active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    per_page = clamp_per_page(per_page)
    employments, pagination = await EmploymentService(db, context).list_employments(
        employee_id=employee_id,
        department_id=department_id,
        active=active,
        page=page,
        per_page=per_page,
    )
    return PaginatedResponse[EmploymentResponse](
        message="Employments retrieved successfully",
        data=[EmploymentResponse.model_validate(e) for e in employments],
        pagination=pagination,
        filters=FiltersEcho(
            applied_filters=applied_filters(
                employee_id=employee_id, department_id=department_id, active=active,
            )
        ),
    )


@router.get("/employments/{employment_id}", response_model=ApiResponse[EmploymentResponse], summary="Get employment")
async def get_employment(
    employment_id: int,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    employment = await EmploymentService(db, context).get_employment(employment_id)
    return ApiResponse[EmploymentResponse](
        message="Employment retrieved successfully",
        data=EmploymentResponse.model_validate(employment),
    )


@router.post(
    "/employments",
    response_model=ApiResponse[EmploymentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create employment",
)
async def create_employment(
    request: EmploymentCreateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    employment = await EmploymentService(db, context).create_employment(request.model_dump())
    return ApiResponse[EmploymentResponse](
        message="Employment created successfully",
        data=EmploymentResponse.model_validate(employment),
    )


@router.put("/employments/{employment_id}", response_model=ApiResponse[EmploymentResponse], summary="Update employment")
async def update_employment(
    employment_id: int,
    request: EmploymentUpdateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    employment = await EmploymentService(db, context).update_employment(
        employment_id, request.model_dump(exclude_unset=True)
    )
    return ApiResponse[EmploymentResponse](
        message="Employment updated successfully",
        data=EmploymentResponse.model_validate(employment),
    )


@router.delete("/employments/{employment_id}", response_model=MessageResponse, summary="Delete employment")
async def delete_employment(
    employment_id: int,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    await EmploymentService(db, context).delete_employment(employment_id)
    return MessageResponse(message="Employment deleted successfully")
