"""
HRMS - Lookup Service

(type, value) rows that back dropdown enumerations in the client and the
import template.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.lookup import Lookup
from app.schemas.common import PaginationMeta
from app.services.context import RequestContext
from app.utils.error_handling import DuplicateEntryException, NotFoundException
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


DEFAULT_LOOKUPS: Dict[str, List[str]] = {
    "gender": ["M", "F"],
    "organization": ["SMRU", "BHF"],
    "employee_status": ["Expats (Local)", "Local ID Staff", "Local non ID Staff"],
    "nationality": ["American", "Australian", "Burmese", "N/A", "Stateless", "Taiwanese", "Thai"],
    "religion": ["Buddhist", "Hindu", "Christian", "Muslim", "Other"],
    "marital_status": ["Single", "Married", "Divorced", "Widowed"],
    "identification_types": [
        "10 years ID", "Burmese ID", "CI", "Borderpass", "Thai ID", "Passport", "Other",
    ],
    "employee_language": ["English", "Thai", "Burmese", "Karen", "French"],
    "employee_education": ["Bachelor", "Master", "PhD"],
    "employee_initial_en": ["Mr", "Mrs", "Ms", "Dr"],
    "employee_initial_th": ["นาย", "นางสาว", "นาง", "ดร"],
    "bank_name": [
        "Bangkok Bank",
        "Kasikorn Bank",
        "Siam Commercial Bank",
        "Krung Thai Bank",
        "Bank of Ayudhya",
        "TMBThanachart Bank",
        "Government Savings Bank",
    ],
}


class LookupService:
    """Service for lookup operations."""

    def __init__(self, db: AsyncSession, context: Optional[RequestContext] = None):
        self.db = db
        self.context = context

    async def get_grouped(self) -> Dict[str, List[Lookup]]:
        """All lookups keyed by type."""
        result = await self.db.execute(select(Lookup).order_by(Lookup.type, Lookup.value))
        grouped: Dict[str, List[Lookup]] = {}
        for lookup in result.scalars().all():
            grouped.setdefault(lookup.type, []).append(lookup)
        return grouped

    async def list_lookups(
        self,
        page: int = 1,
        per_page: int = 10,
        type_filter: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "type",
        sort_order: str = "asc",
    ) -> Tuple[List[Lookup], PaginationMeta]:
        query = select(Lookup)
        if type_filter:
            query = query.where(Lookup.type == type_filter)
        if search:
            query = query.where(Lookup.value.ilike(f"%{search}%"))

        sort_columns = {"type": Lookup.type, "value": Lookup.value, "created_at": Lookup.created_at}
        direction = asc if sort_order == "asc" else desc
        query = query.order_by(direction(sort_columns.get(sort_by, Lookup.type)), Lookup.value, Lookup.id)
        return await paginate(self.db, query, page, per_page)

    async def search(self, term: str, limit: int = 50) -> List[Lookup]:
        search_term = f"%{term}%"
        result = await self.db.execute(
            select(Lookup)
            .where(or_(Lookup.value.ilike(search_term), Lookup.type.ilike(search_term)))
            .order_by(Lookup.type, Lookup.value)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_types(self) -> List[str]:
        result = await self.db.execute(select(Lookup.type).distinct().order_by(Lookup.type))
        return list(result.scalars().all())

    async def get_by_type(self, lookup_type: str) -> List[Lookup]:
        result = await self.db.execute(
            select(Lookup).where(Lookup.type == lookup_type).order_by(Lookup.value)
        )
        lookups = list(result.scalars().all())
        if not lookups:
            raise NotFoundException("Lookup", message=f"No lookups found for type '{lookup_type}'")
        return lookups

    async def get_values(self, lookup_type: str) -> List[str]:
        """Values of one type, empty if none (used for spreadsheet dropdowns)."""
        result = await self.db.execute(
            select(Lookup.value).where(Lookup.type == lookup_type).order_by(Lookup.value)
        )
        return list(result.scalars().all())

    async def get_lookup(self, lookup_id: int) -> Lookup:
        lookup = await self.db.get(Lookup, lookup_id)
        if not lookup:
            raise NotFoundException("Lookup", lookup_id)
        return lookup

    async def create_lookup(self, data: Dict[str, Any]) -> Lookup:
        await self._ensure_unique(data["type"], data["value"])
        actor = self.context.actor_name if self.context else None
        lookup = Lookup(**data, created_by=actor, updated_by=actor)
        self.db.add(lookup)
        await self.db.commit()
        await self.db.refresh(lookup)

        logger.info(f"Created lookup {lookup.id} ({lookup.type}={lookup.value})")
        await self._emit("created", lookup)
        return lookup

    async def update_lookup(self, lookup_id: int, data: Dict[str, Any]) -> Lookup:
        lookup = await self.get_lookup(lookup_id)
        new_type = data.get("type") or lookup.type
        new_value = data.get("value") or lookup.value
        if (new_type, new_value) != (lookup.type, lookup.value):
            await self._ensure_unique(new_type, new_value, exclude_id=lookup.id)

        lookup.type = new_type
        lookup.value = new_value
        if self.context:
            lookup.updated_by = self.context.actor_name
        await self.db.commit()
        await self.db.refresh(lookup)

        logger.info(f"Updated lookup {lookup.id}")
        await self._emit("updated", lookup)
        return lookup

    async def delete_lookup(self, lookup_id: int) -> None:
        lookup = await self.get_lookup(lookup_id)
        await self.db.delete(lookup)
        await self.db.commit()
        logger.info(f"Deleted lookup {lookup_id}")
        await self._emit("deleted", lookup)

    async def seed_defaults(self) -> int:
        """Insert any missing default lookups. Returns rows inserted."""
        result = await self.db.execute(select(Lookup.type, Lookup.value))
        existing = {(row.type, row.value) for row in result.all()}

        created = 0
        for lookup_type, values in DEFAULT_LOOKUPS.items():
            for value in values:
                if (lookup_type, value) in existing:
                    continue
                self.db.add(Lookup(type=lookup_type, value=value, created_by="system", updated_by="system"))
                created += 1
        await self.db.commit()
        logger.info(f"Seeded {created} lookup rows")
        return created

    async def _ensure_unique(self, lookup_type: str, value: str, exclude_id: Optional[int] = None) -> None:
        query = select(func.count(Lookup.id)).where(Lookup.type == lookup_type, Lookup.value == value)
        if exclude_id is not None:
            query = query.where(Lookup.id != exclude_id)
        if (await self.db.execute(query)).scalar():
            raise DuplicateEntryException(
                "Lookup", "value", value,
                message=f"Lookup value '{value}' already exists for type '{lookup_type}'",
            )

    async def _emit(self, action: str, lookup: Lookup) -> None:
        if self.context:
            await self.context.emit(
                action, "lookup", f"Lookup {lookup.type}: {lookup.value} {action}", entity_id=lookup.id,
            )
