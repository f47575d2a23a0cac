"""
HRMS - Leave Service

Leave types and leave balances.

Creating a leave type grants it to every employee for the current year.
Balances keep remaining_days = total_days - used_days on every write; a
negative remainder is stored as is and reports an overdraw.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee
from app.models.leave import LeaveBalance, LeaveType
from app.schemas.common import PaginationMeta
from app.services.cache_service import CacheService
from app.services.context import RequestContext
from app.utils.error_handling import (
    DeletionBlockedException,
    DuplicateEntryException,
    NotFoundException,
    ValidationException,
)
from app.utils.pagination import paginate, paginate_rows

logger = logging.getLogger(__name__)


def _employee_name(employee: Employee) -> str:
    return employee.full_name_en or " ".join(
        p for p in [employee.first_name_th, employee.last_name_th] if p
    )


def flatten_balance(balance: LeaveBalance, employee: Employee, leave_type: LeaveType) -> Dict[str, Any]:
    return {
        "id": balance.id,
        "employee_id": balance.employee_id,
        "staff_id": employee.staff_id,
        "employee_name": _employee_name(employee),
        "leave_type_id": balance.leave_type_id,
        "leave_type_name": leave_type.name,
        "total_days": balance.total_days,
        "used_days": balance.used_days,
        "remaining_days": balance.remaining_days,
        "year": balance.year,
    }


# ===========================================
# LEAVE TYPES
# ===========================================

class LeaveTypeService:
    """Service for leave type operations."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    async def list_leave_types(
        self,
        page: int = 1,
        per_page: int = 10,
        search: Optional[str] = None,
    ) -> Tuple[List[LeaveType], PaginationMeta]:
        query = select(LeaveType)
        if search:
            query = query.where(LeaveType.name.ilike(f"%{search}%"))
        query = query.order_by(LeaveType.name)
        return await paginate(self.db, query, page, per_page)

    async def get_options(self) -> List[LeaveType]:
        result = await self.db.execute(select(LeaveType).order_by(LeaveType.name))
        return list(result.scalars().all())

    async def get_leave_type(self, leave_type_id: int) -> LeaveType:
        leave_type = await self.db.get(LeaveType, leave_type_id)
        if not leave_type:
            raise NotFoundException("Leave type", leave_type_id)
        return leave_type

    async def create_leave_type(self, data: Dict[str, Any]) -> Tuple[LeaveType, int]:
        """
        Create a leave type and grant it to every employee for this year.

        Returns:
            (leave type, number of balances created)
        """
        await self._ensure_unique_name(data["name"])

        leave_type = LeaveType(
            **data,
            created_by=self.context.actor_name,
            updated_by=self.context.actor_name,
        )
        self.db.add(leave_type)
        await self.db.flush()

        year = date.today().year
        total = Decimal(data.get("default_duration") or 0)
        existing = select(LeaveBalance.employee_id).where(
            LeaveBalance.leave_type_id == leave_type.id,
            LeaveBalance.year == year,
        )
        result = await self.db.execute(select(Employee.id).where(Employee.id.not_in(existing)))
        employee_ids = list(result.scalars().all())
        for employee_id in employee_ids:
            self.db.add(
                LeaveBalance(
                    employee_id=employee_id,
                    leave_type_id=leave_type.id,
                    year=year,
                    total_days=total,
                    used_days=Decimal("0"),
                    remaining_days=total,
                    created_by=self.context.actor_name,
                    updated_by=self.context.actor_name,
                )
            )

        await self.db.commit()
        await self.db.refresh(leave_type)

        logger.info(
            f"Created leave type {leave_type.id} ({leave_type.name}); "
            f"{len(employee_ids)} balances created for {year}"
        )
        await self.context.cache.invalidate_statistics(CacheService.STATS_LEAVE_BALANCES)
        await self.context.emit(
            "created", "leave_type", f"Leave type {leave_type.name} created",
            entity_id=leave_type.id, balances_created=len(employee_ids),
        )
        return leave_type, len(employee_ids)

    async def update_leave_type(self, leave_type_id: int, data: Dict[str, Any]) -> LeaveType:
        leave_type = await self.get_leave_type(leave_type_id)
        if data.get("name") and data["name"] != leave_type.name:
            await self._ensure_unique_name(data["name"], exclude_id=leave_type.id)

        for field, value in data.items():
            setattr(leave_type, field, value)
        leave_type.updated_by = self.context.actor_name
        await self.db.commit()
        await self.db.refresh(leave_type)

        logger.info(f"Updated leave type {leave_type.id}")
        await self.context.emit(
            "updated", "leave_type", f"Leave type {leave_type.name} updated", entity_id=leave_type.id,
        )
        return leave_type

    async def delete_leave_type(self, leave_type_id: int) -> None:
        leave_type = await self.get_leave_type(leave_type_id)
        balance_count = (await self.db.execute(
            select(func.count(LeaveBalance.id)).where(LeaveBalance.leave_type_id == leave_type_id)
        )).scalar() or 0
        if balance_count:
            logger.warning(f"Delete of leave type {leave_type_id} blocked by {balance_count} balances")
            raise DeletionBlockedException(
                "Leave type",
                [f"{balance_count} leave balance(s) reference this leave type"],
            )

        name = leave_type.name
        await self.db.delete(leave_type)
        await self.db.commit()

        logger.info(f"Deleted leave type {leave_type_id}")
        await self.context.emit("deleted", "leave_type", f"Leave type {name} deleted", entity_id=leave_type_id)

    async def _ensure_unique_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        query = select(func.count(LeaveType.id)).where(LeaveType.name == name)
        if exclude_id is not None:
            query = query.where(LeaveType.id != exclude_id)
        if (await self.db.execute(query)).scalar():
            raise DuplicateEntryException("Leave type", "name", name)


# ===========================================
# LEAVE BALANCES
# ===========================================

class LeaveBalanceService:
    """Service for leave balance operations."""

    SORT_COLUMNS = {
        "employee_name": Employee.first_name_en,
        "staff_id": Employee.staff_id,
        "leave_type": LeaveType.name,
        "total_days": LeaveBalance.total_days,
        "used_days": LeaveBalance.used_days,
        "remaining_days": LeaveBalance.remaining_days,
        "year": LeaveBalance.year,
        "created_at": LeaveBalance.created_at,
    }

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    async def list_balances(
        self,
        page: int = 1,
        per_page: int = 10,
        employee_id: Optional[int] = None,
        leave_type_id: Optional[int] = None,
        year: Optional[int] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Tuple[List[Dict[str, Any]], PaginationMeta]:
        """Balances for one year, flattened with employee and leave type names."""
        year = year or date.today().year
        query = (
            select(LeaveBalance, Employee, LeaveType)
            .join(Employee, LeaveBalance.employee_id == Employee.id)
            .join(LeaveType, LeaveBalance.leave_type_id == LeaveType.id)
            .where(LeaveBalance.year == year)
        )
        if employee_id is not None:
            query = query.where(LeaveBalance.employee_id == employee_id)
        if leave_type_id is not None:
            query = query.where(LeaveBalance.leave_type_id == leave_type_id)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Employee.staff_id.ilike(search_term),
                    Employee.first_name_en.ilike(search_term),
                    Employee.last_name_en.ilike(search_term),
                )
            )

        direction = asc if sort_order == "asc" else desc
        sort_column = self.SORT_COLUMNS.get(sort_by, LeaveBalance.created_at)
        order = [direction(sort_column)]
        if sort_by == "employee_name":
            order.append(direction(Employee.last_name_en))
        query = query.order_by(*order, LeaveBalance.id)

        rows, pagination = await paginate_rows(self.db, query, page, per_page)
        return [flatten_balance(*row) for row in rows], pagination

    async def get_balance(self, employee_id: int, leave_type_id: int, year: Optional[int] = None) -> Dict[str, Any]:
        year = year or date.today().year
        result = await self.db.execute(
            select(LeaveBalance, Employee, LeaveType)
            .join(Employee, LeaveBalance.employee_id == Employee.id)
            .join(LeaveType, LeaveBalance.leave_type_id == LeaveType.id)
            .where(
                LeaveBalance.employee_id == employee_id,
                LeaveBalance.leave_type_id == leave_type_id,
                LeaveBalance.year == year,
            )
        )
        row = result.first()
        if not row:
            raise NotFoundException(
                "Leave balance",
                message=f"No leave balance found for employee {employee_id}, leave type {leave_type_id}, year {year}",
            )
        return flatten_balance(*row)

    async def create_balance(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a balance with used_days = 0.

        Raises:
            ValidationException: unknown employee or leave type
            DuplicateEntryException: the (employee, leave type, year) triple exists
        """
        year = data.get("year") or date.today().year

        employee = await self.db.get(Employee, data["employee_id"])
        if not employee:
            raise ValidationException("The selected employee id is invalid", field="employee_id")
        leave_type = await self.db.get(LeaveType, data["leave_type_id"])
        if not leave_type:
            raise ValidationException("The selected leave type id is invalid", field="leave_type_id")

        exists = (await self.db.execute(
            select(func.count(LeaveBalance.id)).where(
                LeaveBalance.employee_id == employee.id,
                LeaveBalance.leave_type_id == leave_type.id,
                LeaveBalance.year == year,
            )
        )).scalar()
        if exists:
            raise DuplicateEntryException(
                "Leave balance",
                "leave_type_id",
                leave_type.id,
                message="Leave balance already exists for this employee, leave type, and year",
            )

        total = Decimal(data["total_days"])
        balance = LeaveBalance(
            employee_id=employee.id,
            leave_type_id=leave_type.id,
            year=year,
            total_days=total,
            used_days=Decimal("0"),
            remaining_days=total,
            created_by=self.context.actor_name,
            updated_by=self.context.actor_name,
        )
        self.db.add(balance)
        await self.db.commit()
        await self.db.refresh(balance)

        logger.info(f"Created leave balance {balance.id} for employee {employee.id} ({leave_type.name} {year})")
        await self._after_change(
            "created", balance, f"{leave_type.name} balance created for {employee.display_name}",
        )
        return flatten_balance(balance, employee, leave_type)

    async def update_balance(self, balance_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        balance = await self.db.get(LeaveBalance, balance_id)
        if not balance:
            raise NotFoundException("Leave balance", balance_id)

        if data.get("total_days") is not None:
            balance.total_days = Decimal(data["total_days"])
        if data.get("used_days") is not None:
            balance.used_days = Decimal(data["used_days"])
        balance.recalculate()
        balance.updated_by = self.context.actor_name

        await self.db.commit()
        await self.db.refresh(balance)

        employee = await self.db.get(Employee, balance.employee_id)
        leave_type = await self.db.get(LeaveType, balance.leave_type_id)
        if balance.remaining_days < 0:
            logger.info(f"Leave balance {balance.id} overdrawn by {-balance.remaining_days} days")

        await self._after_change(
            "updated", balance, f"{leave_type.name} balance updated for {employee.display_name}",
            remaining_days=str(balance.remaining_days),
        )
        return flatten_balance(balance, employee, leave_type)

    async def _after_change(self, action: str, balance: LeaveBalance, summary: str, **payload) -> None:
        await self.context.cache.invalidate_statistics(CacheService.STATS_LEAVE_BALANCES)
        await self.context.emit(
            action, "leave_balance", summary,
            entity_id=balance.id, employee_id=balance.employee_id, **payload,
        )
