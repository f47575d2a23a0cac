"""
HRMS - Pagination Helpers

Offset pagination for list endpoints. Totals are counted over the filtered
query (ordering removed), so pagination.total never depends on page size.
"""

import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.schemas.common import PaginationMeta


def clamp_per_page(per_page: Optional[int], default: Optional[int] = None) -> int:
    """Apply default and maximum page size."""
    if not per_page or per_page < 1:
        per_page = default or settings.default_per_page
    return min(per_page, settings.max_per_page)


def build_pagination(total: int, page: int, per_page: int, count_on_page: int) -> PaginationMeta:
    """Build the pagination block for a page of results."""
    last_page = max(1, math.ceil(total / per_page)) if per_page else 1
    first = (page - 1) * per_page + 1 if count_on_page else None
    last = first + count_on_page - 1 if first is not None else None
    return PaginationMeta(
        current_page=page,
        per_page=per_page,
        total=total,
        last_page=last_page,
        from_=first,
        to=last,
        has_more_pages=page < last_page,
    )


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    per_page: int = 10,
) -> Tuple[List[Any], PaginationMeta]:
    """
    Execute a paginated ORM query.

    Args:
        db: Database session
        query: Filtered and ordered select of a single entity
        page: Page number (1-indexed)
        per_page: Items per page (already clamped)

    Returns:
        (items on the page, pagination block)
    """
    page = max(page, 1)

    count_result = await db.execute(
        select(func.count()).select_from(query.order_by(None).subquery())
    )
    total = count_result.scalar() or 0

    result = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
    items = list(result.scalars().unique().all())

    return items, build_pagination(total, page, per_page, len(items))


async def paginate_rows(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    per_page: int = 10,
) -> Tuple[List[Any], PaginationMeta]:
    """Like paginate, for multi-column selects (returns Row objects)."""
    page = max(page, 1)

    count_result = await db.execute(
        select(func.count()).select_from(query.order_by(None).subquery())
    )
    total = count_result.scalar() or 0

    result = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
    rows = list(result.all())

    return rows, build_pagination(total, page, per_page, len(rows))


def applied_filters(**filters: Any) -> Dict[str, Any]:
    """Echo back only the filters the caller actually supplied."""
    return {key: value for key, value in filters.items() if value not in (None, "", [])}


def parse_csv_param(value: Optional[str]) -> Optional[Sequence[str]]:
    """Split a comma-separated query parameter."""
    if not value:
        return None
    parts = [part.strip() for part in value.split(",") if part.strip()]
    return parts or None
