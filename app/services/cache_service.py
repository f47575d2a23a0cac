"""
HRMS - Cache Service

Redis-based caching service.
Provides caching for:
- Module statistics (employees, departments, leave balances, recycle bin)

Cache failures never fail a request: they are logged and reported as a
miss / no-op.
"""

import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

from app.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class CacheService:
    """Redis-based caching service."""

    # Cache key prefixes
    PREFIX_STATS = "hr:stats"

    # Statistics entries
    STATS_EMPLOYEES = "employees"
    STATS_DEPARTMENTS = "departments"
    STATS_LEAVE_BALANCES = "leave_balances"
    STATS_RECYCLE_BIN = "recycle_bin"

    # Default TTL values (in seconds)
    TTL_STATS = 600  # 10 minutes, explicit invalidation on every write

    def __init__(self, redis_url: Optional[str] = None):
        self.redis_url = redis_url or settings.redis_url
        self._client: Optional[redis.Redis] = None

    async def get_client(self) -> redis.Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def close(self):
        """Close Redis connection."""
        if self._client:
            await self._client.close()
            self._client = None

    # =========================================================================
    # GENERIC CACHE OPERATIONS
    # =========================================================================

    async def get(self, key: str) -> Optional[str]:
        """Get a value from cache."""
        try:
            client = await self.get_client()
            return await client.get(key)
        except Exception as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None

    async def set(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
    ) -> bool:
        """Set a value in cache with optional TTL."""
        try:
            client = await self.get_client()
            if ttl:
                await client.setex(key, ttl, value)
            else:
                await client.set(key, value)
            return True
        except Exception as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete a key from cache."""
        try:
            client = await self.get_client()
            await client.delete(key)
            return True
        except Exception as e:
            logger.warning(f"Cache delete failed for {key}: {e}")
            return False

    async def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """Get a JSON value from cache."""
        value = await self.get(key)
        if value:
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON in cache for {key}")
        return None

    async def set_json(
        self,
        key: str,
        value: Dict[str, Any],
        ttl: Optional[int] = None,
    ) -> bool:
        """Set a JSON value in cache."""
        try:
            return await self.set(key, json.dumps(value, default=str), ttl)
        except (TypeError, ValueError) as e:
            logger.warning(f"Cache set_json failed for {key}: {e}")
            return False

    # =========================================================================
    # STATISTICS CACHING
    # =========================================================================

    def _stats_key(self, name: str) -> str:
        """Generate cache key for a statistics entry."""
        return f"{self.PREFIX_STATS}:{name}"

    async def get_statistics(self, name: str) -> Optional[Dict[str, Any]]:
        """Get cached statistics."""
        return await self.get_json(self._stats_key(name))

    async def set_statistics(
        self,
        name: str,
        data: Dict[str, Any],
        ttl: Optional[int] = None,
    ) -> bool:
        """Cache statistics."""
        return await self.set_json(self._stats_key(name), data, ttl or self.TTL_STATS)

    async def invalidate_statistics(self, name: str) -> bool:
        """Drop one statistics entry after a write to its module."""
        deleted = await self.delete(self._stats_key(name))
        if deleted:
            logger.debug(f"Invalidated statistics cache: {name}")
        return deleted

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    async def health_check(self) -> Dict[str, Any]:
        """Check cache health."""
        try:
            client = await self.get_client()
            await client.ping()
            return {"status": "healthy", "connected": True}
        except Exception as e:
            return {
                "status": "unhealthy",
                "connected": False,
                "error": str(e),
            }


# =========================================================================
# GLOBAL CACHE INSTANCE
# =========================================================================

_cache_service: Optional[CacheService] = None


def get_cache_service() -> CacheService:
    """Get global cache service instance."""
    global _cache_service
    if _cache_service is None:
        _cache_service = CacheService()
    return _cache_service


async def close_cache_service():
    """Close global cache service."""
    global _cache_service
    if _cache_service:
        await _cache_service.close()
        _cache_service = None
