"""
HRMS - Notification Service

Delivers domain events as in-app notifications and serves the
notification inbox endpoints.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification, NotificationType
from app.models.user import User
from app.schemas.common import PaginationMeta
from app.services.events import DomainEvent, EventDispatcher, log_event
from app.utils.error_handling import NotFoundException
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)


# entity_type -> notification module
_EVENT_MODULES = {
    "employee": NotificationType.EMPLOYEE,
    "employee_child": NotificationType.EMPLOYEE,
    "employee_education": NotificationType.EMPLOYEE,
    "employee_language": NotificationType.EMPLOYEE,
    "employee_beneficiary": NotificationType.EMPLOYEE,
    "employee_funding_allocation": NotificationType.EMPLOYMENT,
    "employment": NotificationType.EMPLOYMENT,
    "department": NotificationType.DEPARTMENT,
    "position": NotificationType.POSITION,
    "leave_type": NotificationType.LEAVE,
    "leave_balance": NotificationType.LEAVE,
    "lookup": NotificationType.LOOKUP,
    "recycle_bin": NotificationType.RECYCLE_BIN,
}


class NotificationService:
    """Service for managing notifications."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def handle_event(self, event: DomainEvent) -> None:
        """
        Subscriber: store one notification per active user.

        Runs after the emitting operation has committed, so a failure here
        is rolled back on its own and reported by the dispatcher.
        """
        result = await self.db.execute(select(User.id).where(User.is_active == True))
        user_ids = list(result.scalars().all())
        if not user_ids:
            return

        if event.action == "imported":
            module = NotificationType.IMPORT
        else:
            module = _EVENT_MODULES.get(event.entity_type, NotificationType.INFO)
        title = f"{event.entity_type.replace('_', ' ').title()} {event.action}"
        message = event.summary
        if event.actor_name:
            message = f"{event.summary} by {event.actor_name}"

        for user_id in user_ids:
            self.db.add(
                Notification(
                    user_id=user_id,
                    title=title,
                    message=message,
                    notification_type=module.value,
                    action=event.action,
                    entity_type=event.entity_type,
                    entity_id=event.entity_id,
                    payload=event.payload or None,
                )
            )
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def list_notifications(
        self,
        user_id: int,
        unread_only: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[Notification], PaginationMeta]:
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read == False)
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
        return await paginate(self.db, query, page, per_page)

    async def mark_as_read(self, notification_id: int, user_id: int) -> Notification:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.id == notification_id)
            .where(Notification.user_id == user_id)
        )
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotFoundException("Notification", notification_id)

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            await self.db.commit()
            await self.db.refresh(notification)
        return notification

    async def mark_all_as_read(self, user_id: int) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id)
            .where(Notification.is_read == False)
            .values(is_read=True, read_at=datetime.utcnow())
        )
        await self.db.commit()
        return result.rowcount or 0

    async def unread_count(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id))
            .where(Notification.user_id == user_id)
            .where(Notification.is_read == False)
        )
        return result.scalar() or 0


def create_event_dispatcher(db: AsyncSession, deliver_notifications: bool = True) -> EventDispatcher:
    """Dispatcher wired with the standard subscribers for one session."""
    dispatcher = EventDispatcher()
    dispatcher.subscribe(log_event)
    if deliver_notifications:
        dispatcher.subscribe(NotificationService(db).handle_event)
    return dispatcher
