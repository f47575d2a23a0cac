"""
HRMS - Authentication Tests

Login, token refresh and the current-user endpoint.
"""

import pytest
from httpx import AsyncClient

from app.models.user import User
from app.services.auth_service import AuthService
from app.utils.security import create_access_token, get_password_hash


API = "/api/v1"


class TestAuthService:
    """Test cases for AuthService."""

    @pytest.mark.asyncio
    async def test_create_user(self, db_session):
        service = AuthService(db_session)
        user = await service.create_user(email="New.User@Example.com", name="New User", password="SecurePassword123!")

        assert user.email == "new.user@example.com"
        assert user.hashed_password != "SecurePassword123!"  # Should be hashed

    @pytest.mark.asyncio
    async def test_authenticate_user_success(self, db_session, test_user):
        user = await AuthService(db_session).authenticate_user("hr.admin@example.com", "TestPassword123!")
        assert user is not None
        assert user.id == test_user.id

    @pytest.mark.asyncio
    async def test_authenticate_user_wrong_password(self, db_session, test_user):
        assert await AuthService(db_session).authenticate_user("hr.admin@example.com", "WrongPassword!") is None

    @pytest.mark.asyncio
    async def test_authenticate_unknown_user(self, db_session):
        assert await AuthService(db_session).authenticate_user("nobody@example.com", "whatever") is None


class TestAuthEndpoints:

    @pytest.mark.asyncio
    async def test_login(self, client: AsyncClient, test_user):
        response = await client.post(
            f"{API}/auth/login",
            json={"email": "hr.admin@example.com", "password": "TestPassword123!"},
        )
        assert response.status_code == 200

        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["access_token"]
        assert body["user"]["name"] == "HR Admin"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, test_user):
        response = await client.post(
            f"{API}/auth/login",
            json={"email": "hr.admin@example.com", "password": "nope"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, client: AsyncClient, db_session):
        db_session.add(User(
            email="former@example.com",
            name="Former Staff",
            hashed_password=get_password_hash("TestPassword123!"),
            is_active=False,
        ))
        await db_session.commit()

        response = await client.post(
            f"{API}/auth/login",
            json={"email": "former@example.com", "password": "TestPassword123!"},
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_refresh(self, client: AsyncClient, test_user):
        response = await client.post(
            f"{API}/auth/login",
            json={"email": "hr.admin@example.com", "password": "TestPassword123!"},
        )
        refresh_token = response.json()["refresh_token"]

        response = await client.post(f"{API}/auth/refresh", json={"refresh_token": refresh_token})
        assert response.status_code == 200
        assert response.json()["access_token"]

    @pytest.mark.asyncio
    async def test_access_token_is_not_a_refresh_token(self, client: AsyncClient, auth_headers):
        access_token = auth_headers["Authorization"].split()[1]
        response = await client.post(f"{API}/auth/refresh", json={"refresh_token": access_token})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "TOKEN_INVALID"

    @pytest.mark.asyncio
    async def test_garbage_bearer_token(self, client: AsyncClient):
        response = await client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        body = response.json()
        assert body["error"]["code"] == "TOKEN_INVALID"
        assert body["message"] == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_missing_bearer_token(self, client: AsyncClient):
        response = await client.get(f"{API}/auth/me")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, auth_headers):
        response = await client.get(f"{API}/auth/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "hr.admin@example.com"

    @pytest.mark.asyncio
    async def test_token_for_deleted_user(self, client: AsyncClient, db_session):
        token = create_access_token(data={"sub": "999", "email": "ghost@example.com"})
        response = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
