"""
HRMS - Employment Service

Business logic for employment records.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee
from app.models.employment import Employment, Payroll
from app.models.funding_allocation import EmployeeFundingAllocation
from app.models.organization_structure import Department, Position
from app.schemas.common import PaginationMeta
from app.services.context import RequestContext
from app.utils.error_handling import DeletionBlockedException, NotFoundException, ValidationException
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class EmploymentService:
    """Service for employment operations."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    async def list_employments(
        self,
        employee_id: Optional[int] = None,
        department_id: Optional[int] = None,
        active: Optional[bool] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Tuple[List[Employment], PaginationMeta]:
        query = select(Employment)
        if employee_id is not None:
            query = query.where(Employment.employee_id == employee_id)
        if department_id is not None:
            query = query.where(Employment.department_id == department_id)
        if active is not None:
            query = query.where(Employment.active == active)
        query = query.order_by(Employment.start_date.desc(), Employment.id.desc())
        return await paginate(self.db, query, page, per_page)

    async def get_employment(self, employment_id: int) -> Employment:
        employment = await self.db.get(Employment, employment_id)
        if not employment:
            raise NotFoundException("Employment", employment_id)
        return employment

    async def create_employment(self, data: Dict[str, Any]) -> Employment:
        """
        Create an employment record.

        Raises:
            ValidationException: unknown employee/department/position, a
                position outside the department, or a second active record
        """
        employee = await self.db.get(Employee, data["employee_id"])
        if not employee:
            raise ValidationException("The selected employee id is invalid", field="employee_id")
        await self._check_references(data)
        if data.get("active", True):
            await self._ensure_single_active(data["employee_id"])

        employment = Employment(
            **data,
            created_by=self.context.actor_name,
            updated_by=self.context.actor_name,
        )
        self.db.add(employment)
        await self.db.commit()
        await self.db.refresh(employment)

        logger.info(f"Created employment {employment.id} for employee {employment.employee_id}")
        await self.context.emit(
            "created", "employment",
            f"Employment created for {employee.display_name}",
            entity_id=employment.id, employee_id=employment.employee_id,
        )
        return employment

    async def update_employment(self, employment_id: int, data: Dict[str, Any]) -> Employment:
        employment = await self.get_employment(employment_id)

        merged = {
            "department_id": data.get("department_id", employment.department_id),
            "position_id": data.get("position_id", employment.position_id),
        }
        await self._check_references(merged)

        start_date = data.get("start_date", employment.start_date)
        end_date = data.get("end_date", employment.end_date)
        if end_date and start_date and end_date < start_date:
            raise ValidationException("end_date must be on or after start_date", field="end_date")

        if data.get("active") and not employment.active:
            await self._ensure_single_active(employment.employee_id, exclude_id=employment.id)

        for field, value in data.items():
            setattr(employment, field, value)
        employment.updated_by = self.context.actor_name
        await self.db.commit()
        await self.db.refresh(employment)

        logger.info(f"Updated employment {employment.id}")
        await self.context.emit(
            "updated", "employment", "Employment updated",
            entity_id=employment.id, employee_id=employment.employee_id,
        )
        return employment

    async def delete_employment(self, employment_id: int) -> None:
        employment = await self.get_employment(employment_id)
        employee_id = employment.employee_id

        blockers = []
        payroll_count = (await self.db.execute(
            select(func.count(Payroll.id)).where(Payroll.employment_id == employment_id)
        )).scalar() or 0
        if payroll_count:
            blockers.append(f"Employment has {payroll_count} payroll record(s)")
        allocation_count = (await self.db.execute(
            select(func.count(EmployeeFundingAllocation.id))
            .where(EmployeeFundingAllocation.employment_id == employment_id)
        )).scalar() or 0
        if allocation_count:
            blockers.append(f"Employment has {allocation_count} funding allocation(s)")
        if blockers:
            raise DeletionBlockedException("Employment", blockers)

        await self.db.delete(employment)
        await self.db.commit()

        logger.info(f"Deleted employment {employment_id}")
        await self.context.emit(
            "deleted", "employment", "Employment deleted",
            entity_id=employment_id, employee_id=employee_id,
        )

    async def _ensure_single_active(self, employee_id: int, exclude_id: Optional[int] = None) -> None:
        query = select(func.count(Employment.id)).where(
            Employment.employee_id == employee_id,
            Employment.active == True,
        )
        if exclude_id is not None:
            query = query.where(Employment.id != exclude_id)
        if (await self.db.execute(query)).scalar():
            raise ValidationException(
                "Employee already has an active employment",
                field="active",
            )

    async def _check_references(self, data: Dict[str, Any]) -> None:
        department_id = data.get("department_id")
        position_id = data.get("position_id")

        if department_id is not None and not await self.db.get(Department, department_id):
            raise ValidationException("The selected department id is invalid", field="department_id")

        if position_id is not None:
            position = await self.db.get(Position, position_id)
            if not position:
                raise ValidationException("The selected position id is invalid", field="position_id")
            if department_id is not None and position.department_id != department_id:
                raise ValidationException(
                    "The position must belong to the selected department",
                    field="position_id",
                )
