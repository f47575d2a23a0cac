"""
HRMS - Employee Record Service

CRUD for the records an employee owns (children, education, languages,
beneficiaries, funding allocations). One service class serves every record
type; the type-specific rules live in small check hooks.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import BaseModel
from app.models.employee import Employee
from app.models.employment import Employment
from app.models.funding_allocation import EmployeeFundingAllocation
from app.schemas.common import PaginationMeta
from app.services.context import RequestContext
from app.utils.error_handling import NotFoundException, ValidationException
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class EmployeeRecordService:
    """Service for one kind of employee-owned record."""

    def __init__(
        self,
        db: AsyncSession,
        context: RequestContext,
        model: Type[BaseModel],
        entity_type: str,
        label: str,
    ):
        self.db = db
        self.context = context
        self.model = model
        self.entity_type = entity_type
        self.label = label

    async def list_records(
        self,
        employee_id: Optional[int] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Tuple[List[BaseModel], PaginationMeta]:
        query = select(self.model)
        if employee_id is not None:
            query = query.where(self.model.employee_id == employee_id)
        query = query.order_by(self.model.id)
        return await paginate(self.db, query, page, per_page)

    async def get_record(self, record_id: int) -> BaseModel:
        record = await self.db.get(self.model, record_id)
        if not record:
            raise NotFoundException(self.label, record_id)
        return record

    async def create_record(self, data: Dict[str, Any]) -> BaseModel:
        await self._ensure_employee(data["employee_id"])
        await self._check(data["employee_id"], data)

        record = self.model(
            **data,
            created_by=self.context.actor_name,
            updated_by=self.context.actor_name,
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)

        logger.info(f"Created {self.entity_type} {record.id} for employee {record.employee_id}")
        await self.context.emit(
            "created", self.entity_type, f"{self.label} added",
            entity_id=record.id, employee_id=record.employee_id,
        )
        return record

    async def update_record(self, record_id: int, data: Dict[str, Any]) -> BaseModel:
        record = await self.get_record(record_id)
        merged = {column.key: getattr(record, column.key) for column in self.model.__table__.columns}
        merged.update(data)
        await self._check(record.employee_id, merged)

        for field, value in data.items():
            setattr(record, field, value)
        record.updated_by = self.context.actor_name
        await self.db.commit()
        await self.db.refresh(record)

        logger.info(f"Updated {self.entity_type} {record.id}")
        await self.context.emit(
            "updated", self.entity_type, f"{self.label} updated",
            entity_id=record.id, employee_id=record.employee_id,
        )
        return record

    async def delete_record(self, record_id: int) -> None:
        record = await self.get_record(record_id)
        employee_id = record.employee_id
        await self.db.delete(record)
        await self.db.commit()

        logger.info(f"Deleted {self.entity_type} {record_id}")
        await self.context.emit(
            "deleted", self.entity_type, f"{self.label} deleted",
            entity_id=record_id, employee_id=employee_id,
        )

    async def _ensure_employee(self, employee_id: int) -> None:
        exists = (await self.db.execute(
            select(func.count(Employee.id)).where(Employee.id == employee_id)
        )).scalar()
        if not exists:
            raise ValidationException("The selected employee id is invalid", field="employee_id")

    async def _check(self, employee_id: int, values: Dict[str, Any]) -> None:
        start, end = values.get("start_date"), values.get("end_date")
        if start and end and end < start:
            raise ValidationException("end_date must be on or after start_date", field="end_date")

        if self.model is EmployeeFundingAllocation and values.get("employment_id"):
            employment = await self.db.get(Employment, values["employment_id"])
            if not employment or employment.employee_id != employee_id:
                raise ValidationException(
                    "The employment must belong to the same employee",
                    field="employment_id",
                )
