"""
HRMS - FastAPI Dependencies

Shared dependencies for authentication, database sessions, and the
per-request service context.
"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.models.user import User
from app.services.cache_service import CacheService, get_cache_service
from app.services.context import RequestContext
from app.services.notification_service import create_event_dispatcher
from app.utils.error_handling import AuthenticationException, ErrorCode
from app.utils.security import verify_access_token


# HTTP Bearer token security
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    """
    Get the current authenticated user from the Bearer token.

    Raises:
        AuthenticationException: If token is missing or invalid, or the user is gone
    """
    if not credentials:
        raise AuthenticationException("Not authenticated")

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise AuthenticationException("Invalid or expired token", code=ErrorCode.TOKEN_INVALID)

    user_id = payload.get("sub")
    try:
        user_pk = int(user_id)
    except (TypeError, ValueError):
        raise AuthenticationException("Invalid token payload", code=ErrorCode.TOKEN_INVALID)

    result = await db.execute(select(User).where(User.id == user_pk))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationException("User not found")

    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Ensure the authenticated user is active."""
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )
    return current_user


def get_cache() -> CacheService:
    """Cache handle dependency (overridable in tests)."""
    return get_cache_service()


async def get_request_context(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
    cache: CacheService = Depends(get_cache),
) -> RequestContext:
    """Actor, cache and event dispatcher for the services of one request."""
    return RequestContext(
        actor_id=current_user.id,
        actor_name=current_user.name,
        cache=cache,
        events=create_event_dispatcher(db),
    )
