"""
HRMS - Authentication Schemas

Pydantic schemas for authentication requests and responses.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class UserLoginRequest(BaseModel):
    """Schema for user login request."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenRefreshRequest(BaseModel):
    """Schema for token refresh request."""
    refresh_token: str


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class TokenResponse(BaseModel):
    """Schema for token response."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class UserResponse(BaseModel):
    """Schema for user response."""
    id: int
    email: str
    name: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UserWithTokenResponse(TokenResponse):
    """Login response: the token pair plus the user."""
    user: UserResponse
