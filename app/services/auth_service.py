"""
HRMS - Authentication Service

Business logic for user authentication.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.user import User
from app.utils.security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email address."""
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Returns:
            User if authentication successful, None otherwise
        """
        user = await self.get_user_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            logger.info(f"Failed login for {email}")
            return None
        return user

    async def create_user(self, email: str, name: str, password: str, is_active: bool = True) -> User:
        """Create an API user (used by the seed script and tests)."""
        user = User(
            email=email.lower(),
            name=name,
            hashed_password=get_password_hash(password),
            is_active=is_active,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"Created user {user.id} ({user.email})")
        return user

    def create_tokens(self, user: User) -> dict:
        """
        Create access and refresh tokens for user.

        Returns:
            Dictionary with access_token, refresh_token, token_type, expires_in
        """
        token_data = {"sub": str(user.id), "email": user.email}
        return {
            "access_token": create_access_token(token_data),
            "refresh_token": create_refresh_token(token_data),
            "token_type": "bearer",
            "expires_in": settings.access_token_expire_minutes * 60,
        }
