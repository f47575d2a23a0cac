"""
HRMS - Employee Records Router

CRUD endpoints for employee-owned records. Every record type exposes the
same five routes, so they are registered from one table below.
"""

from typing import Optional, Type

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel as Schema
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_request_context
from app.models.base import BaseModel
from app.models.employee import (
    EmployeeBeneficiary,
    EmployeeChild,
    EmployeeEducation,
    EmployeeLanguage,
)
from app.models.funding_allocation import EmployeeFundingAllocation
from app.schemas.common import ApiResponse, FiltersEcho, MessageResponse, PaginatedResponse
from app.schemas.employee_records import (
    EmployeeBeneficiaryCreateRequest,
    EmployeeBeneficiaryResponse,
    EmployeeBeneficiaryUpdateRequest,
    EmployeeChildCreateRequest,
    EmployeeChildResponse,
    EmployeeChildUpdateRequest,
    EmployeeEducationCreateRequest,
    EmployeeEducationResponse,
    EmployeeEducationUpdateRequest,
    EmployeeLanguageCreateRequest,
    EmployeeLanguageResponse,
    EmployeeLanguageUpdateRequest,
    FundingAllocationCreateRequest,
    FundingAllocationResponse,
    FundingAllocationUpdateRequest,
)
from app.services.context import RequestContext
from app.services.employee_record_service import EmployeeRecordService
from app.utils.pagination import applied_filters, clamp_per_page


router = APIRouter()


def register_record_routes(
    path: str,
    model: Type[BaseModel],
    entity_type: str,
    label: str,
    create_schema: Type[Schema],
    update_schema: Type[Schema],
    response_schema: Type[Schema],
) -> None:
    """Add list/get/create/update/delete routes for one record type."""

    def service(db: AsyncSession, context: RequestContext) -> EmployeeRecordService:
        return EmployeeRecordService(db, context, model, entity_type, label)

    @router.get(path, response_model=PaginatedResponse[response_schema], summary=f"List {label.lower()} records")
    async def list_records(
        employee_id: Optional[int] = Query(None, ge=1),
        page: int = Query(1, ge=1),
        per_page: Optional[int] = Query(None, ge=1, le=100),
        context: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_async_session),
    ):
        per_page = clamp_per_page(per_page)
        records, pagination = await service(db, context).list_records(employee_id, page, per_page)
        return PaginatedResponse[response_schema](
            message=f"{label} records retrieved successfully",
            data=[response_schema.model_validate(r) for r in records],
            pagination=pagination,
            filters=FiltersEcho(applied_filters=applied_filters(employee_id=employee_id)),
        )

    @router.get(f"{path}/{{record_id}}", response_model=ApiResponse[response_schema], summary=f"Get {label.lower()}")
    async def get_record(
        record_id: int,
        context: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_async_session),
    ):
        record = await service(db, context).get_record(record_id)
        return ApiResponse[response_schema](
            message=f"{label} retrieved successfully",
            data=response_schema.model_validate(record),
        )

    @router.post(
        path,
        response_model=ApiResponse[response_schema],
        status_code=status.HTTP_201_CREATED,
        summary=f"Create {label.lower()}",
    )
    async def create_record(
        request: create_schema,
        context: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_async_session),
    ):
        record = await service(db, context).create_record(request.model_dump())
        return ApiResponse[response_schema](
            message=f"{label} created successfully",
            data=response_schema.model_validate(record),
        )

    @router.put(f"{path}/{{record_id}}", response_model=ApiResponse[response_schema], summary=f"Update {label.lower()}")
    async def update_record(
        record_id: int,
        request: update_schema,
        context: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_async_session),
    ):
        record = await service(db, context).update_record(record_id, request.model_dump(exclude_unset=True))
        return ApiResponse[response_schema](
            message=f"{label} updated successfully",
            data=response_schema.model_validate(record),
        )

    @router.delete(f"{path}/{{record_id}}", response_model=MessageResponse, summary=f"Delete {label.lower()}")
    async def delete_record(
        record_id: int,
        context: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_async_session),
    ):
        await service(db, context).delete_record(record_id)
        return MessageResponse(message=f"{label} deleted successfully")


register_record_routes(
    "/employee-children", EmployeeChild, "employee_child", "Employee child",
    EmployeeChildCreateRequest, EmployeeChildUpdateRequest, EmployeeChildResponse,
)
register_record_routes(
    "/employee-education", EmployeeEducation, "employee_education", "Employee education",
    EmployeeEducationCreateRequest, EmployeeEducationUpdateRequest, EmployeeEducationResponse,
)
register_record_routes(
    "/employee-language", EmployeeLanguage, "employee_language", "Employee language",
    EmployeeLanguageCreateRequest, EmployeeLanguageUpdateRequest, EmployeeLanguageResponse,
)
register_record_routes(
    "/employee-beneficiaries", EmployeeBeneficiary, "employee_beneficiary", "Employee beneficiary",
    EmployeeBeneficiaryCreateRequest, EmployeeBeneficiaryUpdateRequest, EmployeeBeneficiaryResponse,
)
register_record_routes(
    "/employee-funding-allocations", EmployeeFundingAllocation, "employee_funding_allocation",
    "Funding allocation",
    FundingAllocationCreateRequest, FundingAllocationUpdateRequest, FundingAllocationResponse,
)
