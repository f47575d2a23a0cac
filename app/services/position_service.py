"""
HRMS - Position Service

Business logic for positions and the reporting hierarchy inside a
department.

Hierarchy rules (create and update):
- a supervisor must exist, be active and belong to the same department;
- with a supervisor, level is derived as supervisor.level + 1;
- level 1 positions report to nobody and must be managers;
- no position may report to itself or to one of its own subordinates;
- moving a position re-levels everything below it, up to level 10.
"""

import logging
from collections import deque
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.employment import Employment
from app.models.organization_structure import Department, Position
from app.schemas.common import PaginationMeta
from app.services.cache_service import CacheService
from app.services.context import RequestContext
from app.utils.error_handling import (
    DeletionBlockedException,
    NotFoundException,
    ValidationException,
)
from app.utils.pagination import paginate_rows

logger = logging.getLogger(__name__)

MAX_LEVEL = 10


class PositionService:
    """Service for position operations."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get_options(self, department_id: Optional[int] = None) -> List[Position]:
        query = select(Position).where(Position.is_active == True)
        if department_id is not None:
            query = query.where(Position.department_id == department_id)
        query = query.order_by(Position.level, Position.title)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_positions(
        self,
        page: int = 1,
        per_page: int = 10,
        department_id: Optional[int] = None,
        is_active: Optional[bool] = None,
        is_manager: Optional[bool] = None,
        search: Optional[str] = None,
        sort_by: str = "title",
        sort_order: str = "asc",
    ) -> Tuple[List[Tuple[Position, str]], PaginationMeta]:
        """Positions joined with their department name."""
        query = (
            select(Position, Department.name.label("department_name"))
            .join(Department, Position.department_id == Department.id)
        )
        if department_id is not None:
            query = query.where(Position.department_id == department_id)
        if is_active is not None:
            query = query.where(Position.is_active == is_active)
        if is_manager is not None:
            query = query.where(Position.is_manager == is_manager)
        if search:
            search_term = f"%{search}%"
            query = query.where(or_(Position.title.ilike(search_term), Department.name.ilike(search_term)))

        sort_columns = {
            "title": Position.title,
            "level": Position.level,
            "created_at": Position.created_at,
            "department_name": Department.name,
        }
        direction = asc if sort_order == "asc" else desc
        query = query.order_by(direction(sort_columns.get(sort_by, Position.title)), Position.id)

        return await paginate_rows(self.db, query, page, per_page)

    async def get_position(self, position_id: int, with_supervisor: bool = False) -> Position:
        query = select(Position).where(Position.id == position_id)
        if with_supervisor:
            query = query.options(
                selectinload(Position.reports_to),
                selectinload(Position.department),
            ).execution_options(populate_existing=True)
        position = (await self.db.execute(query)).scalar_one_or_none()
        if not position:
            raise NotFoundException("Position", position_id)
        return position

    async def count_direct_reports(self, position_id: int, active_only: bool = False) -> int:
        query = select(func.count(Position.id)).where(Position.reports_to_id == position_id)
        if active_only:
            query = query.where(Position.is_active == True)
        return (await self.db.execute(query)).scalar() or 0

    async def get_direct_reports(self, position_id: int) -> List[Position]:
        await self.get_position(position_id)
        result = await self.db.execute(
            select(Position)
            .where(Position.reports_to_id == position_id)
            .order_by(Position.level, Position.title)
        )
        return list(result.scalars().all())

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def create_position(self, data: Dict[str, Any]) -> Position:
        values = await self._validate_hierarchy(dict(data))

        position = Position(
            **values,
            created_by=self.context.actor_name,
            updated_by=self.context.actor_name,
        )
        self.db.add(position)
        await self.db.commit()
        await self.db.refresh(position)

        logger.info(f"Created position {position.id} ({position.title}) in department {position.department_id}")
        await self._after_change("created", position, f"Position {position.title} created")
        return position

    async def update_position(self, position_id: int, data: Dict[str, Any]) -> Position:
        position = await self.get_position(position_id)

        merged = {
            "department_id": position.department_id,
            "reports_to_id": position.reports_to_id,
            "level": position.level,
            "is_manager": position.is_manager,
            **data,
        }
        values = await self._validate_hierarchy(merged, position_id=position.id)

        subordinates: List[Tuple[Position, int]] = []
        if values["level"] != position.level:
            subordinates = await self._subtree_levels(position.id, values["level"])
            if any(level > MAX_LEVEL for _, level in subordinates):
                raise ValidationException(
                    "Validation failed",
                    errors={"level": [f"Subordinate positions would exceed level {MAX_LEVEL}"]},
                )

        for field in data:
            setattr(position, field, values[field])
        position.level = values["level"]
        for subordinate, level in subordinates:
            subordinate.level = level
        position.updated_by = self.context.actor_name
        await self.db.commit()
        await self.db.refresh(position)

        if subordinates:
            logger.info(f"Re-levelled {len(subordinates)} position(s) below position {position.id}")
        logger.info(f"Updated position {position.id}")
        await self._after_change("updated", position, f"Position {position.title} updated")
        return position

    async def delete_position(self, position_id: int) -> None:
        """
        Delete a position.

        Raises:
            DeletionBlockedException: employments reference the position or
                it still has active direct reports
        """
        position = await self.get_position(position_id)

        blockers = []
        employment_count = (await self.db.execute(
            select(func.count(Employment.id)).where(Employment.position_id == position_id)
        )).scalar() or 0
        if employment_count:
            blockers.append(f"{employment_count} employment record(s) reference this position")
        direct_reports = await self.count_direct_reports(position_id, active_only=True)
        if direct_reports:
            blockers.append(f"Position has {direct_reports} active direct report(s)")
        if blockers:
            logger.warning(f"Delete of position {position_id} blocked: {blockers}")
            raise DeletionBlockedException("Position", blockers)

        # Inactive subordinates lose their supervisor
        orphans = await self.db.execute(select(Position).where(Position.reports_to_id == position_id))
        for orphan in orphans.scalars().all():
            orphan.reports_to_id = None

        title = position.title
        await self.db.delete(position)
        await self.db.commit()

        logger.info(f"Deleted position {position_id}")
        await self.context.cache.invalidate_statistics(CacheService.STATS_DEPARTMENTS)
        await self.context.emit("deleted", "position", f"Position {title} deleted", entity_id=position_id)

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _validate_hierarchy(
        self,
        values: Dict[str, Any],
        position_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Check hierarchy rules and derive the level. Returns the final values."""
        errors: Dict[str, List[str]] = {}

        department = await self.db.get(Department, values["department_id"])
        if not department:
            raise ValidationException("Selected department does not exist", field="department_id")

        supervisor_id = values.get("reports_to_id")
        if supervisor_id is not None:
            if position_id is not None and supervisor_id == position_id:
                raise ValidationException("Position cannot report to itself", field="reports_to_id")

            supervisor = await self.db.get(Position, supervisor_id)
            if not supervisor:
                raise ValidationException("Selected supervisor position does not exist", field="reports_to_id")
            if not supervisor.is_active:
                errors.setdefault("reports_to_id", []).append("Cannot report to an inactive position")
            if supervisor.department_id != values["department_id"]:
                errors.setdefault("reports_to_id", []).append(
                    "Position cannot report to someone from a different department"
                )
            if position_id is not None and await self._is_subordinate(supervisor_id, position_id):
                errors.setdefault("reports_to_id", []).append(
                    "This would create a circular reporting relationship"
                )
            values["level"] = supervisor.level + 1
            if values["level"] > MAX_LEVEL:
                errors.setdefault("level", []).append(f"Level cannot exceed {MAX_LEVEL}")

        level = values.get("level") or 1
        values["level"] = level
        if level == 1 and not values.get("is_manager"):
            errors.setdefault("is_manager", []).append("Level 1 positions must be managers")

        if errors:
            raise ValidationException("Validation failed", errors=errors)
        return values

    async def _is_subordinate(self, candidate_id: int, position_id: int) -> bool:
        """True if candidate_id sits anywhere below position_id."""
        seen = set()
        current_id: Optional[int] = candidate_id
        while current_id is not None and current_id not in seen:
            if current_id == position_id:
                return True
            seen.add(current_id)
            current_id = (await self.db.execute(
                select(Position.reports_to_id).where(Position.id == current_id)
            )).scalar()
        return False

    async def _subtree_levels(self, position_id: int, level: int) -> List[Tuple[Position, int]]:
        """Every position below position_id, paired with its level once position_id sits at level."""
        changes: List[Tuple[Position, int]] = []
        seen = {position_id}
        queue = deque([(position_id, level)])
        while queue:
            parent_id, parent_level = queue.popleft()
            result = await self.db.execute(select(Position).where(Position.reports_to_id == parent_id))
            for child in result.scalars().all():
                if child.id in seen:
                    continue
                seen.add(child.id)
                changes.append((child, parent_level + 1))
                queue.append((child.id, parent_level + 1))
        return changes

    async def _after_change(self, action: str, position: Position, summary: str) -> None:
        await self.context.cache.invalidate_statistics(CacheService.STATS_DEPARTMENTS)
        await self.context.emit(
            action, "position", summary,
            entity_id=position.id, department_id=position.department_id,
        )
