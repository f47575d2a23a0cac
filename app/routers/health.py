"""
HRMS - Health Router
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_async_session
from app.dependencies import get_cache
from app.services.cache_service import CacheService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(
    db: AsyncSession = Depends(get_async_session),
    cache: CacheService = Depends(get_cache),
):
    """Health check endpoint."""
    try:
        await db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        database = "unavailable"

    cache_health = await cache.health_check()
    return {
        "status": "healthy" if database == "connected" else "degraded",
        "app": settings.app_name,
        "database": database,
        "cache": cache_health.get("status", "unknown"),
    }
