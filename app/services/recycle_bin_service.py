"""
HRMS - Recycle Bin Service

Read side of the recycle bin: listing deletion manifests and summary
statistics. Restore and permanent delete live in SafeDeleteService.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.recycle_bin import DeletionManifest
from app.schemas.common import PaginationMeta
from app.services.cache_service import CacheService
from app.services.context import RequestContext
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


class RecycleBinService:
    """Service for browsing the recycle bin."""

    def __init__(self, db: AsyncSession, context: RequestContext):
        self.db = db
        self.context = context

    async def list_entries(
        self,
        page: int = 1,
        per_page: int = 10,
        model: Optional[str] = None,
    ) -> Tuple[List[DeletionManifest], PaginationMeta]:
        query = select(DeletionManifest)
        if model:
            query = query.where(DeletionManifest.root_model == model)
        query = query.order_by(DeletionManifest.created_at.desc(), DeletionManifest.id.desc())
        return await paginate(self.db, query, page, per_page)

    async def get_stats(self) -> Dict[str, Any]:
        """Entry counts per root model plus the oldest and newest deletion."""
        cached = await self.context.cache.get_statistics(CacheService.STATS_RECYCLE_BIN)
        if cached:
            return cached

        result = await self.db.execute(
            select(DeletionManifest.root_model, func.count(DeletionManifest.id))
            .group_by(DeletionManifest.root_model)
        )
        by_model = {model: count for model, count in result.all()}

        bounds = (await self.db.execute(
            select(func.min(DeletionManifest.created_at), func.max(DeletionManifest.created_at))
        )).one()

        stats = {
            "total": sum(by_model.values()),
            "by_model": by_model,
            "oldest": bounds[0].isoformat() if bounds[0] else None,
            "newest": bounds[1].isoformat() if bounds[1] else None,
        }
        await self.context.cache.set_statistics(CacheService.STATS_RECYCLE_BIN, stats)
        return stats
