"""
HRMS - Employee Import / Export Router

Spreadsheet upload (inline or queued), import status polling, template
download and employee export.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_async_session
from app.dependencies import get_request_context
from app.models.employee import EmployeeStatus, Organization
from app.models.import_status import ImportState
from app.schemas.common import ApiResponse
from app.schemas.employee_import import ImportQueued, ImportResult, ImportStatusResponse
from app.services.context import RequestContext
from app.services.employee_import_service import EmployeeImportService
from app.services.employee_spreadsheet import build_template, read_rows
from app.services.file_storage_service import FileStorageService
from app.utils.error_handling import InvalidFileException

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _xlsx_response(content: bytes, filename: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# ===========================================
# UPLOADS
# ===========================================

@router.post(
    "/uploads/employee",
    response_model=ApiResponse,
    summary="Import employees from a spreadsheet",
    description=(
        "Accepts .xlsx, .xls or .csv in the template layout (data from row 3). "
        "Large files are queued and return 202 with an import id to poll."
    ),
)
async def upload_employees(
    response: Response,
    file: UploadFile = File(...),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    file_name = file.filename or "employees.xlsx"
    extension = Path(file_name).suffix.lower().lstrip(".")
    if extension not in settings.import_allowed_extensions_list:
        raise InvalidFileException(
            f"Unsupported file type '.{extension}'. Allowed: {settings.import_allowed_extensions}"
        )

    content = await file.read()
    if not content:
        raise InvalidFileException("The uploaded file is empty")
    if len(content) > settings.import_max_file_size_bytes:
        raise InvalidFileException(f"File exceeds the {settings.import_max_file_size_mb} MB limit")

    rows = read_rows(content, extension)
    service = EmployeeImportService(db, context)

    if len(rows) > settings.import_async_row_threshold:
        from app.tasks.celery_tasks import import_employees_task

        stored_path = await FileStorageService().save(content, file_name)
        import_status = await service.create_status(file_name, len(rows), ImportState.QUEUED)
        import_employees_task.delay(
            import_status.import_id, str(stored_path), context.actor_name, context.actor_id,
        )
        logger.info(f"Queued import {import_status.import_id} ({len(rows)} rows)")

        response.status_code = status.HTTP_202_ACCEPTED
        return ApiResponse[ImportQueued](
            message="Import queued for background processing",
            data=ImportQueued(
                import_id=import_status.import_id,
                status=import_status.status,
                total_rows=len(rows),
            ),
        )

    import_status = await service.import_rows(file_name, rows)
    result = ImportResult.model_validate(import_status)

    if import_status.status == ImportState.FAILED.value:
        response.status_code = status.HTTP_409_CONFLICT
        return ApiResponse[ImportResult](success=False, message="Import failed and was rolled back", data=result)

    if result.skipped:
        response.status_code = status.HTTP_207_MULTI_STATUS
        message = f"Imported {result.processed} of {result.total_rows} rows; {result.skipped} rows had errors"
    else:
        message = f"Imported {result.processed} employees successfully"
    return ApiResponse[ImportResult](success=result.skipped == 0, message=message, data=result)


@router.get(
    "/uploads/employee/status/{import_id}",
    response_model=ApiResponse[ImportStatusResponse],
    summary="Import status",
)
async def get_import_status(
    import_id: str,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    record = await EmployeeImportService(db, context).get_status(import_id)
    return ApiResponse[ImportStatusResponse](
        message="Import status retrieved successfully",
        data=ImportStatusResponse.model_validate(record),
    )


# ===========================================
# DOWNLOADS
# ===========================================

@router.get("/downloads/employee-template", summary="Download the employee import template")
async def download_employee_template(
    context: RequestContext = Depends(get_request_context),
):
    content, filename = build_template()
    return _xlsx_response(content, filename)


@router.get("/downloads/employees", summary="Export employees")
async def export_employees(
    organization: Optional[Organization] = Query(None),
    status_filter: Optional[EmployeeStatus] = Query(None, alias="status"),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    content, filename = await EmployeeImportService(db, context).export_employees(
        organization=organization.value if organization else None,
        status=status_filter.value if status_filter else None,
    )
    return _xlsx_response(content, filename)
