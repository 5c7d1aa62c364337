"""
User Pydantic schemas for API request/response handling.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from calendarium.schemas.role import RoleResponse


class UserCreate(BaseModel):
    """
    Schema for signing up.

    The password minimum length is enforced by the service so that it
    reports PasswordTooShort rather than a generic validation failure.
    """

    lastname: str = Field(min_length=1, max_length=100, description="Family name")
    firstname: str = Field(min_length=1, max_length=100, description="Given name")
    email: EmailStr = Field(description="Login email, unique among live users")
    password: str = Field(min_length=1, max_length=128, description="Plain password")


class UserUpdate(BaseModel):
    """
    Schema for a partial user update. Omitted fields are left unchanged.

    Email is a plain string here: the service checks its format, reporting
    InvalidEmailFormat, and stores it normalized the way signup does.
    """

    lastname: str | None = Field(default=None, min_length=1, max_length=100)
    firstname: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, max_length=128)


class UserResponse(BaseModel):
    """Public view of a user (never includes credentials)."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    lastname: str
    firstname: str
    email: str
    created_at: datetime
    updated_at: datetime | None = None


class UserCreatedResponse(BaseModel):
    user_id: int


class UserWithRoles(BaseModel):
    """A user with the live roles they hold."""

    user: UserResponse
    roles: list[RoleResponse]
