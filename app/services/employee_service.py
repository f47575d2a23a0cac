"""
HRMS - Employee Service

Business logic for the employee master record: listing, lookups,
create/update (full and per section), statistics and safe delete.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import asc, delete, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.employee import Employee, EmployeeLanguage
from app.models.recycle_bin import DeletionManifest
from app.schemas.common import PaginationMeta
from app.services.cache_service import CacheService
from app.services.context import RequestContext
from app.services.employee_rules import (
    check_bank_rules,
    check_cross_field_rules,
    check_date_of_birth,
    merge_errors,
)
from app.services.safe_delete_service import SafeDeleteService
from app.utils.error_handling import (
    DuplicateEntryException,
    EmployeeNotFoundException,
    ValidationException,
)
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


SORTABLE_FIELDS = {
    "staff_id": Employee.staff_id,
    "first_name_en": Employee.first_name_en,
    "last_name_en": Employee.last_name_en,
    "organization": Employee.organization,
    "status": Employee.status,
    "date_of_birth": Employee.date_of_birth,
    "created_at": Employee.created_at,
}

NAME_FIELDS = ("first_name_en", "last_name_en", "first_name_th", "last_name_th")


class EmployeeService:
    """Service for employee operations."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def list_employees(
        self,
        page: int = 1,
        per_page: int = 10,
        organizations: Optional[Sequence[str]] = None,
        statuses: Optional[Sequence[str]] = None,
        gender: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Tuple[List[Employee], PaginationMeta]:
        """Paginated, filtered employee list."""
        query = select(Employee)

        if organizations:
            query = query.where(Employee.organization.in_(organizations))
        if statuses:
            query = query.where(Employee.status.in_(statuses))
        if gender:
            query = query.where(Employee.gender == gender)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Employee.staff_id.ilike(search_term),
                    Employee.first_name_en.ilike(search_term),
                    Employee.last_name_en.ilike(search_term),
                )
            )

        sort_column = SORTABLE_FIELDS.get(sort_by, Employee.created_at)
        direction = asc if sort_order == "asc" else desc
        query = query.order_by(direction(sort_column), direction(Employee.id))

        return await paginate(self.db, query, page, per_page)

    async def get_employee(self, employee_id: int, detailed: bool = False) -> Employee:
        """Get an employee or raise EmployeeNotFoundException."""
        query = select(Employee).where(Employee.id == employee_id)
        if detailed:
            query = query.options(
                selectinload(Employee.employments),
                selectinload(Employee.children),
                selectinload(Employee.education),
                selectinload(Employee.languages),
                selectinload(Employee.beneficiaries),
            ).execution_options(populate_existing=True)

        result = await self.db.execute(query)
        employee = result.scalar_one_or_none()
        if not employee:
            raise EmployeeNotFoundException(employee_id)
        return employee

    async def get_by_staff_id(self, staff_id: str) -> List[Employee]:
        """All employees sharing a staff id (one per organization at most)."""
        result = await self.db.execute(
            select(Employee)
            .where(Employee.staff_id == staff_id)
            .order_by(Employee.organization)
        )
        employees = list(result.scalars().all())
        if not employees:
            raise EmployeeNotFoundException(message=f"No employee found with staff ID '{staff_id}'")
        return employees

    async def staff_id_exists(
        self,
        organization: str,
        staff_id: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        query = select(func.count(Employee.id)).where(
            Employee.organization == organization,
            Employee.staff_id == staff_id,
        )
        if exclude_id is not None:
            query = query.where(Employee.id != exclude_id)
        return bool((await self.db.execute(query)).scalar())

    async def get_statistics(self) -> Dict[str, Any]:
        """Headcount breakdown, served from cache when available."""
        cached = await self.context.cache.get_statistics(CacheService.STATS_EMPLOYEES)
        if cached is not None:
            return cached

        total = (await self.db.execute(select(func.count(Employee.id)))).scalar() or 0

        async def breakdown(column) -> Dict[str, int]:
            result = await self.db.execute(
                select(column, func.count(Employee.id)).group_by(column)
            )
            return {(key if key is not None else "unknown"): count for key, count in result.all()}

        stats = {
            "total": total,
            "by_organization": await breakdown(Employee.organization),
            "by_status": await breakdown(Employee.status),
            "by_gender": await breakdown(Employee.gender),
        }
        await self.context.cache.set_statistics(CacheService.STATS_EMPLOYEES, stats)
        return stats

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def create_employee(self, data: Dict[str, Any]) -> Employee:
        """
        Create an employee.

        Raises:
            DuplicateEntryException: staff id already used in the organization
            ValidationException: cross-field or age rules fail
        """
        errors: Dict[str, List[str]] = {}
        if not any(data.get(name) for name in NAME_FIELDS):
            errors["first_name_en"] = ["At least one name field is required"]
        dob_errors, _ = check_date_of_birth(data.get("date_of_birth"))
        merge_errors(errors, dob_errors)
        merge_errors(errors, check_cross_field_rules(data))
        if errors:
            raise ValidationException("Validation failed", errors=errors)

        if await self.staff_id_exists(data["organization"], data["staff_id"]):
            raise DuplicateEntryException(
                "Employee",
                "staff_id",
                data["staff_id"],
                message=f"Staff ID '{data['staff_id']}' already exists in {data['organization']}",
            )

        employee = Employee(
            **data,
            created_by=self.context.actor_name,
            updated_by=self.context.actor_name,
        )
        self.db.add(employee)
        await self.db.commit()
        await self.db.refresh(employee)

        logger.info(f"Created employee {employee.id} ({employee.organization}/{employee.staff_id})")
        await self._after_change("created", employee, f"Employee {employee.display_name} created")
        return employee

    async def update_employee(
        self,
        employee_id: int,
        data: Dict[str, Any],
        section: Optional[str] = None,
    ) -> Employee:
        """
        Apply a partial update.

        Cross-field rules run against the merged record, so e.g. setting
        marital_status to Married on an employee without a spouse name fails
        even when the payload only carries marital_status.
        """
        employee = await self.get_employee(employee_id)
        self._validate_merged(employee, data)

        organization = data.get("organization", employee.organization)
        staff_id = data.get("staff_id", employee.staff_id)
        if (organization, staff_id) != (employee.organization, employee.staff_id):
            if await self.staff_id_exists(organization, staff_id, exclude_id=employee.id):
                raise DuplicateEntryException(
                    "Employee",
                    "staff_id",
                    staff_id,
                    message=f"Staff ID '{staff_id}' already exists in {organization}",
                )

        for field, value in data.items():
            setattr(employee, field, value)
        employee.updated_by = self.context.actor_name

        await self.db.commit()
        await self.db.refresh(employee)

        label = f"{section} information" if section else "record"
        logger.info(f"Updated employee {employee.id} {label}")
        await self._after_change(
            "updated",
            employee,
            f"Employee {employee.display_name} {label} updated",
            section=section,
            fields=sorted(data.keys()),
        )
        return employee

    async def update_personal_information(
        self,
        employee_id: int,
        data: Dict[str, Any],
        languages: Optional[List[Dict[str, Any]]] = None,
    ) -> Employee:
        """Update personal fields; a languages list replaces the language rows."""
        if languages is not None:
            employee = await self.get_employee(employee_id)
            self._validate_merged(employee, data)
            await self.db.execute(
                delete(EmployeeLanguage).where(EmployeeLanguage.employee_id == employee_id)
            )
            for item in languages:
                self.db.add(
                    EmployeeLanguage(
                        employee_id=employee_id,
                        language=item["language"],
                        proficiency_level=item.get("proficiency_level"),
                        created_by=self.context.actor_name,
                        updated_by=self.context.actor_name,
                    )
                )
        return await self.update_employee(employee_id, data, section="personal")

    async def update_bank_information(self, employee_id: int, data: Dict[str, Any]) -> Employee:
        employee = await self.get_employee(employee_id)
        merged = {field: getattr(employee, field) for field in data}
        merged.update(data)
        errors = check_bank_rules(merged)
        if errors:
            raise ValidationException("Validation failed", errors=errors)
        return await self.update_employee(employee_id, data, section="bank")

    async def delete_employee(self, employee_id: int, reason: Optional[str] = None) -> DeletionManifest:
        """Safe delete one employee with all owned records."""
        employee = await self.get_employee(employee_id)
        return await SafeDeleteService(self.db, self.context).delete(employee, reason)

    async def delete_selected(self, ids: List[int], reason: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
        """Per-id safe delete; one blocked id does not stop the others."""
        result = await SafeDeleteService(self.db, self.context).bulk_delete(Employee, ids, reason)
        logger.info(
            f"Batch employee delete: {len(result['succeeded'])} succeeded, {len(result['failed'])} failed"
        )
        return result

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _validate_merged(self, employee: Employee, data: Dict[str, Any], today: Optional[date] = None) -> None:
        merged = {
            column.key: getattr(employee, column.key)
            for column in Employee.__table__.columns
        }
        merged.update(data)
        errors = check_cross_field_rules(merged, today)
        for required in ("organization", "staff_id"):
            if not merged.get(required):
                errors.setdefault(required, []).append(f"The {required} field is required")
        if "date_of_birth" in data:
            dob_errors, _ = check_date_of_birth(data["date_of_birth"], today=today)
            merge_errors(errors, dob_errors)
        if errors:
            raise ValidationException("Validation failed", errors=errors)

    async def _after_change(self, action: str, employee: Employee, summary: str, **payload) -> None:
        await self.context.cache.invalidate_statistics(CacheService.STATS_EMPLOYEES)
        await self.context.emit(action, "employee", summary, entity_id=employee.id, **payload)
