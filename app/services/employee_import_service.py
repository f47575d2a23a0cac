"""
HRMS - Employee Import Service

Runs spreadsheet imports against the database and records their outcome
in import_statuses.

Valid rows are buffered and committed together at the end; invalid rows
are skipped and reported as one "Row N: ..." line each. Small files are
imported inline by the upload endpoint, larger ones by the Celery worker.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.employee import Employee, EmployeeBeneficiary
from app.models.import_status import ImportState, ImportStatus
from app.services.cache_service import CacheService
from app.services.context import RequestContext
from app.services.employee_spreadsheet import ParsedRow, build_export, parse_row
from app.utils.error_handling import NotFoundException

logger = logging.getLogger(__name__)


Row = Tuple[int, List[Any]]


class EmployeeImportService:
    """Service for employee spreadsheet import and export."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    # ===========================================
    # STATUS RECORDS
    # ===========================================

    async def create_status(
        self,
        file_name: str,
        total_rows: int,
        state: ImportState = ImportState.QUEUED,
    ) -> ImportStatus:
        import_status = ImportStatus(
            import_id=uuid.uuid4().hex,
            status=state.value,
            file_name=file_name,
            total_rows=total_rows,
            errors=[],
            warnings=[],
            created_by=self.context.actor_name,
        )
        self.db.add(import_status)
        await self.db.commit()
        await self.db.refresh(import_status)
        return import_status

    async def get_status(self, import_id: str) -> ImportStatus:
        result = await self.db.execute(select(ImportStatus).where(ImportStatus.import_id == import_id))
        import_status = result.scalar_one_or_none()
        if not import_status:
            raise NotFoundException("Import", message=f"Import '{import_id}' not found")
        return import_status

    async def mark_failed(self, import_id: str, message: str) -> ImportStatus:
        import_status = await self.get_status(import_id)
        import_status.status = ImportState.FAILED.value
        import_status.errors = [message]
        import_status.finished_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(import_status)
        logger.error(f"Import {import_id} failed: {message}")
        return import_status

    # ===========================================
    # IMPORT
    # ===========================================

    async def import_rows(self, file_name: str, rows: Sequence[Row]) -> ImportStatus:
        """Create a status record and import immediately."""
        import_status = await self.create_status(file_name, len(rows), ImportState.PROCESSING)
        return await self.run_import(import_status.import_id, rows)

    async def run_import(self, import_id: str, rows: Sequence[Row]) -> ImportStatus:
        """
        Validate every row, then commit all valid employees in one transaction.

        An unexpected error rolls back, marks the import failed and is re-raised.

        Returns:
            The updated import status record
        """
        import_status = await self.get_status(import_id)
        try:
            return await self._process(import_status, rows)
        except Exception as e:
            await self.db.rollback()
            await self.mark_failed(import_id, f"Import failed: {type(e).__name__}: {e}")
            raise

    async def _process(self, import_status: ImportStatus, rows: Sequence[Row]) -> ImportStatus:
        import_id = import_status.import_id
        import_status.status = ImportState.PROCESSING.value
        import_status.total_rows = len(rows)
        import_status.started_at = datetime.utcnow()
        await self.db.commit()

        existing = await self._existing_staff_ids({values[1] for _, values in rows if values[1]})

        errors: List[str] = []
        warnings: List[str] = []
        seen: Dict[Tuple[str, str], int] = {}
        valid: List[ParsedRow] = []

        for row_number, values in rows:
            parsed = parse_row(row_number, values)
            self._check_duplicates(parsed, existing, seen)
            warnings.extend(f"Row {row_number}: {w}" for w in parsed.warnings)
            if parsed.is_valid:
                valid.append(parsed)
            else:
                errors.append(parsed.error_message())

        actor = self.context.actor_name
        for parsed in valid:
            employee = Employee(**parsed.data, created_by=actor, updated_by=actor)
            employee.beneficiaries = [
                EmployeeBeneficiary(**kin, created_by=actor, updated_by=actor)
                for kin in parsed.beneficiaries
            ]
            self.db.add(employee)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(f"Import {import_id} rolled back: {e.orig}")
            await self.db.refresh(import_status)
            import_status.status = ImportState.FAILED.value
            import_status.processed = 0
            import_status.skipped = len(rows)
            import_status.errors = errors + [
                "Import rolled back: a staff ID was taken while the file was being processed"
            ]
            import_status.warnings = warnings
            import_status.finished_at = datetime.utcnow()
            await self.db.commit()
            await self.db.refresh(import_status)
            return import_status

        await self.db.refresh(import_status)
        import_status.status = ImportState.COMPLETED.value
        import_status.processed = len(valid)
        import_status.skipped = len(rows) - len(valid)
        import_status.errors = errors
        import_status.warnings = warnings
        import_status.finished_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(import_status)

        logger.info(
            f"Import {import_id} ({import_status.file_name}): {len(rows)} rows, "
            f"{len(valid)} imported, {len(rows) - len(valid)} skipped, {len(warnings)} warnings"
        )
        if valid:
            await self.context.cache.invalidate_statistics(CacheService.STATS_EMPLOYEES)
        await self.context.emit(
            "imported",
            "employee",
            f"Employee import {import_status.file_name}: {len(valid)} of {len(rows)} rows imported",
            import_id=import_id,
            processed=len(valid),
            skipped=len(rows) - len(valid),
        )
        return import_status

    async def _existing_staff_ids(self, staff_ids: Set[Any]) -> Set[Tuple[str, str]]:
        """(organization, staff_id) pairs already stored for the given ids."""
        normalized = {str(int(s)) if isinstance(s, float) and s.is_integer() else str(s).strip() for s in staff_ids}
        if not normalized:
            return set()
        result = await self.db.execute(
            select(Employee.organization, Employee.staff_id).where(Employee.staff_id.in_(normalized))
        )
        return {(row.organization, row.staff_id) for row in result.all()}

    @staticmethod
    def _check_duplicates(
        parsed: ParsedRow,
        existing: Set[Tuple[str, str]],
        seen: Dict[Tuple[str, str], int],
    ) -> None:
        organization = parsed.data.get("organization")
        staff_id = parsed.data.get("staff_id")
        if not organization or not staff_id or "staff_id" in parsed.errors:
            return

        key = (organization, staff_id)
        if key in existing:
            parsed.errors["staff_id"] = [f"Staff ID '{staff_id}' already exists in {organization}"]
        elif key in seen:
            parsed.errors["staff_id"] = [
                f"Staff ID '{staff_id}' is duplicated in this file (first seen on row {seen[key]})"
            ]
        else:
            seen[key] = parsed.row_number

    # ===========================================
    # EXPORT
    # ===========================================

    async def export_employees(
        self,
        organization: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Tuple[bytes, str]:
        query = select(Employee).options(selectinload(Employee.beneficiaries))
        if organization:
            query = query.where(Employee.organization == organization)
        if status:
            query = query.where(Employee.status == status)
        query = query.order_by(Employee.organization, Employee.staff_id).execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return build_export(result.scalars().all())
