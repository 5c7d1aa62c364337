"""
Authentication Pydantic schemas for API request/response handling.

This module provides:
- Login request and response schemas
- Token refresh schemas
- Session listing schema (tokens masked)
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from calendarium.schemas.role import RoleResponse
from calendarium.schemas.user import UserResponse


class LoginRequest(BaseModel):
    """
    Schema for user login request.

    Attributes:
        email: User's email address
        password: User's password
    """

    email: EmailStr = Field(description="User's email address")
    password: str = Field(min_length=1, description="User's password")


class LoginResponse(BaseModel):
    """
    Schema returned by a successful login.

    Attributes:
        user: The authenticated user
        session_token: Bearer token for the Authorization header (64 hex chars)
        refresh_token: Token accepted by /auth/refresh
        expires_at: Expiry of session_token (UTC)
        roles: Live roles held by the user
    """

    user: UserResponse
    session_token: str
    refresh_token: str
    expires_at: datetime
    roles: list[RoleResponse]


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(min_length=1, description="Refresh token issued at login")


class RefreshResponse(BaseModel):
    """New session token; the refresh token itself is unchanged."""

    session_token: str
    expires_at: datetime


class SessionResponse(BaseModel):
    """
    One of the caller's sessions.

    ``session_token`` always holds the masking sentinel and the refresh
    token is never exposed.
    """

    model_config = ConfigDict(from_attributes=True)

    user_session_id: int
    user_id: int
    session_token: str
    expires_at: datetime
    device_info: str | None = None
    ip_address: str | None = None
    location: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime | None = None
