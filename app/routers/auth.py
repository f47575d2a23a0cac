"""
HRMS - Authentication Router

API endpoints for user authentication.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_current_active_user
from app.models.user import User
from app.schemas.auth import (
    TokenRefreshRequest,
    TokenResponse,
    UserLoginRequest,
    UserResponse,
    UserWithTokenResponse,
)
from app.services.auth_service import AuthService
from app.utils.error_handling import AuthenticationException, ErrorCode
from app.utils.security import verify_refresh_token


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/login",
    response_model=UserWithTokenResponse,
    summary="Login user",
    description="Authenticate with email and password and receive an access/refresh token pair.",
)
async def login(
    request: UserLoginRequest,
    db: AsyncSession = Depends(get_async_session),
):
    """Login with email and password."""
    auth_service = AuthService(db)
    user = await auth_service.authenticate_user(email=request.email, password=request.password)

    if not user:
        raise AuthenticationException("Invalid email or password")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    tokens = auth_service.create_tokens(user)
    return UserWithTokenResponse(**tokens, user=UserResponse.model_validate(user))


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh access token",
    description="Get a new token pair using a refresh token.",
)
async def refresh_token(
    request: TokenRefreshRequest,
    db: AsyncSession = Depends(get_async_session),
):
    """Refresh access token."""
    payload = verify_refresh_token(request.refresh_token)
    if not payload:
        raise AuthenticationException("Invalid or expired refresh token", code=ErrorCode.TOKEN_INVALID)

    auth_service = AuthService(db)
    try:
        user = await auth_service.get_user_by_id(int(payload.get("sub")))
    except (TypeError, ValueError):
        user = None

    if not user:
        raise AuthenticationException("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    return TokenResponse(**auth_service.create_tokens(user))


@router.get("/me", response_model=UserResponse, summary="Get current user")
async def get_me(
    current_user: User = Depends(get_current_active_user),
):
    """Get current authenticated user."""
    return UserResponse.model_validate(current_user)
