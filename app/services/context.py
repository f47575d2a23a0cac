"""
HRMS - Request Context

Per-operation collaborators handed to services: who is acting, the cache
handle, and the event dispatcher. Built per HTTP request by
app.dependencies.get_request_context and per job by the Celery tasks.
"""

from dataclasses import dataclass
from typing import Optional

from app.services.cache_service import CacheService
from app.services.events import DomainEvent, EventDispatcher


@dataclass
class RequestContext:
    actor_id: Optional[int]
    actor_name: str
    cache: CacheService
    events: EventDispatcher

    async def emit(
        self,
        action: str,
        entity_type: str,
        summary: str,
        entity_id: Optional[int] = None,
        **payload,
    ) -> None:
        """Publish a domain event stamped with the current actor."""
        await self.events.publish(
            DomainEvent(
                action=action,
                entity_type=entity_type,
                summary=summary,
                entity_id=entity_id,
                actor_id=self.actor_id,
                actor_name=self.actor_name,
                payload=payload,
            )
        )
