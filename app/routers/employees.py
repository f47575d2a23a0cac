"""
HRMS - Employees Router

API endpoints for the employee master record.
"""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_request_context
from app.schemas.common import ApiResponse, FiltersEcho, IdsRequest, PaginatedResponse
from app.schemas.employee import (
    EmployeeBankInformationRequest,
    EmployeeBasicInformationRequest,
    EmployeeCreateRequest,
    EmployeeDetailResponse,
    EmployeeFamilyInformationRequest,
    EmployeeListItem,
    EmployeePersonalInformationRequest,
    EmployeeResponse,
    EmployeeStatistics,
    EmployeeUpdateRequest,
)
from app.schemas.recycle_bin import BatchDeleteResult, SafeDeleteResponse
from app.services.context import RequestContext
from app.services.employee_service import EmployeeService
from app.utils.pagination import applied_filters, clamp_per_page, parse_csv_param


router = APIRouter()


@router.get(
    "/employees",
    response_model=PaginatedResponse[EmployeeListItem],
    summary="List employees",
)
async def list_employees(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    organization: Optional[str] = Query(None, description="Comma-separated organizations"),
    status_filter: Optional[str] = Query(None, alias="status", description="Comma-separated statuses"),
    gender: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Staff ID, first or last name"),
    sort_by: str = Query(
        "created_at",
        pattern="^(staff_id|first_name_en|last_name_en|organization|status|date_of_birth|created_at)$",
    ),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    per_page = clamp_per_page(per_page)
    organizations = parse_csv_param(organization)
    statuses = parse_csv_param(status_filter)

    service = EmployeeService(db, context)
    employees, pagination = await service.list_employees(
        page=page,
        per_page=per_page,
        organizations=organizations,
        statuses=statuses,
        gender=gender,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )

    return PaginatedResponse[EmployeeListItem](
        message="Employees retrieved successfully",
        data=[EmployeeListItem.model_validate(e) for e in employees],
        pagination=pagination,
        filters=FiltersEcho(
            applied_filters=applied_filters(
                organization=organizations,
                status=statuses,
                gender=gender,
                search=search,
            )
        ),
    )


@router.get(
    "/employees/statistics",
    response_model=ApiResponse[EmployeeStatistics],
    summary="Employee statistics",
)
async def employee_statistics(
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    stats = await EmployeeService(db, context).get_statistics()
    return ApiResponse[EmployeeStatistics](
        message="Employee statistics retrieved successfully",
        data=EmployeeStatistics(**stats),
    )


@router.get(
    "/employees/staff-id/{staff_id}",
    response_model=ApiResponse[List[EmployeeResponse]],
    summary="Find employees by staff ID",
)
async def get_employees_by_staff_id(
    staff_id: str,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    employees = await EmployeeService(db, context).get_by_staff_id(staff_id)
    return ApiResponse[List[EmployeeResponse]](
        message="Employees retrieved successfully",
        data=[EmployeeResponse.model_validate(e) for e in employees],
    )


@router.delete(
    "/employees/delete-selected",
    response_model=ApiResponse[BatchDeleteResult],
    summary="Delete selected employees",
    description="Safe delete each id independently. Returns 207 when some ids fail.",
)
async def delete_selected_employees(
    response: Response,
    request: IdsRequest = Body(...),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    result = await EmployeeService(db, context).delete_selected(request.ids, request.reason)

    succeeded = len(result["succeeded"])
    failed = len(result["failed"])
    if failed:
        response.status_code = status.HTTP_207_MULTI_STATUS
        message = f"{succeeded} employee(s) moved to recycle bin, {failed} failed"
    else:
        message = f"{succeeded} employee(s) moved to recycle bin"

    return ApiResponse[BatchDeleteResult](
        success=failed == 0,
        message=message,
        data=BatchDeleteResult(**result),
    )


@router.get(
    "/employees/{employee_id}",
    response_model=ApiResponse[EmployeeDetailResponse],
    summary="Get employee",
)
async def get_employee(
    employee_id: int,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    employee = await EmployeeService(db, context).get_employee(employee_id, detailed=True)
    return ApiResponse[EmployeeDetailResponse](
        message="Employee retrieved successfully",
        data=EmployeeDetailResponse.model_validate(employee),
    )


@router.post(
    "/employees",
    response_model=ApiResponse[EmployeeResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create employee",
)
async def create_employee(
    request: EmployeeCreateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    employee = await EmployeeService(db, context).create_employee(request.model_dump())
    return ApiResponse[EmployeeResponse](
        message="Employee created successfully",
        data=EmployeeResponse.model_validate(employee),
    )


@router.put(
    "/employees/{employee_id}",
    response_model=ApiResponse[EmployeeResponse],
    summary="Update employee",
)
async def update_employee(
    employee_id: int,
    request: EmployeeUpdateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    employee = await EmployeeService(db, context).update_employee(
        employee_id, request.model_dump(exclude_unset=True)
    )
    return ApiResponse[EmployeeResponse](
        message="Employee updated successfully",
        data=EmployeeResponse.model_validate(employee),
    )


@router.put(
    "/employees/{employee_id}/basic-information",
    response_model=ApiResponse[EmployeeResponse],
    summary="Update basic information",
)
async def update_basic_information(
    employee_id: int,
    request: EmployeeBasicInformationRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    employee = await EmployeeService(db, context).update_employee(
        employee_id, request.model_dump(exclude_unset=True), section="basic"
    )
    return ApiResponse[EmployeeResponse](
        message="Employee basic information updated successfully",
        data=EmployeeResponse.model_validate(employee),
    )


@router.put(
    "/employees/{employee_id}/personal-information",
    response_model=ApiResponse[EmployeeDetailResponse],
    summary="Update personal information",
)
async def update_personal_information(
    employee_id: int,
    request: EmployeePersonalInformationRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    data = request.model_dump(exclude_unset=True)
    languages = data.pop("languages", None)

    service = EmployeeService(db, context)
    await service.update_personal_information(employee_id, data, languages)
    employee = await service.get_employee(employee_id, detailed=True)
    return ApiResponse[EmployeeDetailResponse](
        message="Employee personal information updated successfully",
        data=EmployeeDetailResponse.model_validate(employee),
    )


@router.put(
    "/employees/{employee_id}/family-information",
    response_model=ApiResponse[EmployeeResponse],
    summary="Update family information",
)
async def update_family_information(
    employee_id: int,
    request: EmployeeFamilyInformationRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    employee = await EmployeeService(db, context).update_employee(
        employee_id, request.model_dump(exclude_unset=True), section="family"
    )
    return ApiResponse[EmployeeResponse](
        message="Employee family information updated successfully",
        data=EmployeeResponse.model_validate(employee),
    )


@router.put(
    "/employees/{employee_id}/bank-information",
    response_model=ApiResponse[EmployeeResponse],
    summary="Update bank information",
)
async def update_bank_information(
    employee_id: int,
    request: EmployeeBankInformationRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    employee = await EmployeeService(db, context).update_bank_information(
        employee_id, request.model_dump(exclude_unset=True)
    )
    return ApiResponse[EmployeeResponse](
        message="Employee bank information updated successfully",
        data=EmployeeResponse.model_validate(employee),
    )


@router.delete(
    "/employees/{employee_id}",
    response_model=SafeDeleteResponse,
    summary="Delete employee",
    description="Move the employee and all owned records to the recycle bin.",
)
async def delete_employee(
    employee_id: int,
    reason: Optional[str] = Query(None, max_length=1000),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    manifest = await EmployeeService(db, context).delete_employee(employee_id, reason)
    return SafeDeleteResponse(
        message="Employee moved to recycle bin",
        deletion_key=manifest.deletion_key,
        deleted_records_count=manifest.snapshot_count,
    )
