"""
HRMS - Notification and Event Tests
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.notification import Notification
from app.models.user import User
from app.services.events import DomainEvent, EventDispatcher
from app.services.notification_service import NotificationService
from app.utils.security import get_password_hash


API = "/api/v1"


@pytest.fixture
async def inbox(db_session, test_user):
    notifications = [
        Notification(user_id=test_user.id, title="Employee created", message="John Doe created", notification_type="employee"),
        Notification(user_id=test_user.id, title="Leave Type created", message="Annual Leave created", notification_type="leave"),
    ]
    db_session.add_all(notifications)
    await db_session.commit()
    return notifications


class TestNotificationInbox:

    @pytest.mark.asyncio
    async def test_list(self, client: AsyncClient, auth_headers, inbox):
        response = await client.get(f"{API}/notifications", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 2

    @pytest.mark.asyncio
    async def test_mark_one_read(self, client: AsyncClient, auth_headers, inbox):
        response = await client.put(f"{API}/notifications/{inbox[0].id}/read", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["is_read"] is True

        response = await client.get(f"{API}/notifications", params={"unread_only": True}, headers=auth_headers)
        assert [n["id"] for n in response.json()["data"]] == [inbox[1].id]

    @pytest.mark.asyncio
    async def test_mark_all_read(self, client: AsyncClient, auth_headers, inbox):
        response = await client.put(f"{API}/notifications/read-all", headers=auth_headers)
        assert response.json()["data"]["count"] == 2

        response = await client.get(f"{API}/notifications", params={"unread_only": True}, headers=auth_headers)
        assert response.json()["pagination"]["total"] == 0

    @pytest.mark.asyncio
    async def test_cannot_read_other_users_notification(self, client: AsyncClient, auth_headers, db_session):
        other = User(email="other@example.com", name="Other", hashed_password=get_password_hash("x"), is_active=True)
        db_session.add(other)
        await db_session.commit()
        notification = Notification(user_id=other.id, title="t", message="m", notification_type="info")
        db_session.add(notification)
        await db_session.commit()

        response = await client.put(f"{API}/notifications/{notification.id}/read", headers=auth_headers)
        assert response.status_code == 404


class TestEventDelivery:

    @pytest.mark.asyncio
    async def test_one_notification_per_active_user(self, db_session, test_user):
        db_session.add(User(email="inactive@example.com", name="Gone", hashed_password="x", is_active=False))
        await db_session.commit()

        await NotificationService(db_session).handle_event(
            DomainEvent(action="created", entity_type="department", summary="Department Finance created", actor_name="HR Admin")
        )

        notifications = (await db_session.execute(select(Notification))).scalars().all()
        assert len(notifications) == 1
        assert notifications[0].user_id == test_user.id
        assert notifications[0].notification_type == "department"
        assert notifications[0].title == "Department created"
        assert notifications[0].message == "Department Finance created by HR Admin"

    @pytest.mark.asyncio
    async def test_import_events_use_import_module(self, db_session, test_user):
        await NotificationService(db_session).handle_event(
            DomainEvent(action="imported", entity_type="employee", summary="Imported 3 employees")
        )
        notification = (await db_session.execute(select(Notification))).scalar_one()
        assert notification.notification_type == "import"

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_propagate(self):
        delivered = []

        async def broken(event):
            raise RuntimeError("mail server down")

        async def recorder(event):
            delivered.append(event.name)

        dispatcher = EventDispatcher()
        dispatcher.subscribe(broken)
        dispatcher.subscribe(recorder)

        await dispatcher.publish(DomainEvent(action="deleted", entity_type="position", summary="Position removed"))
        assert delivered == ["position.deleted"]
