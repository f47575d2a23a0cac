"""
HRMS - Domain Events

Mutating services publish a DomainEvent after their transaction commits.
Subscribers (notification delivery, logging) are registered on an
EventDispatcher; a failing subscriber is logged and never propagates back
into the operation that emitted the event.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class DomainEvent:
    """Something that happened to an HR record."""
    action: str                  # e.g. "created", "updated", "deleted", "imported"
    entity_type: str             # e.g. "employee", "department"
    summary: str
    entity_id: Optional[int] = None
    actor_id: Optional[int] = None
    actor_name: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def name(self) -> str:
        return f"{self.entity_type}.{self.action}"


EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventDispatcher:
    """In-process publish/subscribe for domain events."""

    def __init__(self):
        self._handlers: List[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    async def publish(self, event: DomainEvent) -> None:
        for handler in self._handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    f"Event handler {getattr(handler, '__qualname__', handler)} failed for {event.name}: {e}",
                    exc_info=True,
                )


async def log_event(event: DomainEvent) -> None:
    """Subscriber that writes every event to the application log."""
    logger.info(
        f"{event.name} id={event.entity_id} by={event.actor_name or 'system'}: {event.summary}"
    )
