"""
HRMS - Department Service

Business logic for departments. Deleting a department moves it and its
positions to the recycle bin.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.organization_structure import Department, Position
from app.models.recycle_bin import DeletionManifest
from app.schemas.common import PaginationMeta
from app.services.cache_service import CacheService
from app.services.context import RequestContext
from app.services.safe_delete_service import SafeDeleteService
from app.utils.error_handling import DuplicateEntryException, NotFoundException
from app.utils.pagination import paginate_rows

logger = logging.getLogger(__name__)

OPTIONS_LIMIT = 200


class DepartmentService:
    """Service for department operations."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    async def get_options(
        self,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[Department]:
        query = select(Department)
        if search:
            query = query.where(Department.name.ilike(f"%{search}%"))
        if is_active is not None:
            query = query.where(Department.is_active == is_active)
        query = query.order_by(Department.name).limit(OPTIONS_LIMIT)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_departments(
        self,
        page: int = 1,
        per_page: int = 20,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        sort_by: str = "name",
        sort_order: str = "asc",
    ) -> Tuple[List[Dict[str, Any]], PaginationMeta]:
        """Departments with their position counts."""
        positions_count = (
            select(func.count(Position.id))
            .where(Position.department_id == Department.id)
            .correlate(Department)
            .scalar_subquery()
            .label("positions_count")
        )
        active_positions_count = (
            select(func.count(Position.id))
            .where(Position.department_id == Department.id, Position.is_active == True)
            .correlate(Department)
            .scalar_subquery()
            .label("active_positions_count")
        )
        query = select(Department, positions_count, active_positions_count)

        if search:
            search_term = f"%{search}%"
            query = query.where(
                Department.name.ilike(search_term) | Department.description.ilike(search_term)
            )
        if is_active is not None:
            query = query.where(Department.is_active == is_active)

        sort_columns = {
            "name": Department.name,
            "created_at": Department.created_at,
            "positions_count": positions_count,
        }
        direction = asc if sort_order == "asc" else desc
        query = query.order_by(direction(sort_columns.get(sort_by, Department.name)), Department.id)

        rows, pagination = await paginate_rows(self.db, query, page, per_page)
        items = [
            {
                **{column.key: getattr(department, column.key) for column in Department.__table__.columns},
                "positions_count": count or 0,
                "active_positions_count": active_count or 0,
            }
            for department, count, active_count in rows
        ]
        return items, pagination

    async def get_department(self, department_id: int) -> Department:
        department = await self.db.get(Department, department_id)
        if not department:
            raise NotFoundException("Department", department_id)
        return department

    async def get_positions(
        self,
        department_id: int,
        is_active: Optional[bool] = None,
        is_manager: Optional[bool] = None,
    ) -> List[Position]:
        """Positions of a department ordered by level, then title."""
        await self.get_department(department_id)
        query = (
            select(Position)
            .options(selectinload(Position.reports_to))
            .where(Position.department_id == department_id)
            .execution_options(populate_existing=True)
        )
        if is_active is not None:
            query = query.where(Position.is_active == is_active)
        if is_manager is not None:
            query = query.where(Position.is_manager == is_manager)
        query = query.order_by(Position.level, Position.title)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_managers(self, department_id: int) -> List[Position]:
        return await self.get_positions(department_id, is_active=True, is_manager=True)

    async def create_department(self, data: Dict[str, Any]) -> Department:
        await self._ensure_unique_name(data["name"])

        department = Department(
            **data,
            created_by=self.context.actor_name,
            updated_by=self.context.actor_name,
        )
        self.db.add(department)
        await self.db.commit()
        await self.db.refresh(department)

        logger.info(f"Created department {department.id} ({department.name})")
        await self._after_change("created", department, f"Department {department.name} created")
        return department

    async def update_department(self, department_id: int, data: Dict[str, Any]) -> Department:
        department = await self.get_department(department_id)
        if data.get("name") and data["name"] != department.name:
            await self._ensure_unique_name(data["name"], exclude_id=department.id)

        for field, value in data.items():
            setattr(department, field, value)
        department.updated_by = self.context.actor_name
        await self.db.commit()
        await self.db.refresh(department)

        logger.info(f"Updated department {department.id}")
        await self._after_change("updated", department, f"Department {department.name} updated")
        return department

    async def delete_department(self, department_id: int, reason: Optional[str] = None) -> DeletionManifest:
        department = await self.get_department(department_id)
        return await SafeDeleteService(self.db, self.context).delete(department, reason)

    async def _ensure_unique_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        query = select(func.count(Department.id)).where(Department.name == name)
        if exclude_id is not None:
            query = query.where(Department.id != exclude_id)
        if (await self.db.execute(query)).scalar():
            raise DuplicateEntryException("Department", "name", name)

    async def _after_change(self, action: str, department: Department, summary: str) -> None:
        await self.context.cache.invalidate_statistics(CacheService.STATS_DEPARTMENTS)
        await self.context.emit(action, "department", summary, entity_id=department.id)
