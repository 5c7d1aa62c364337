"""
Role Pydantic schemas for API request/response handling.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RoleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50, description="Unique role name")
    description: str | None = Field(default=None, max_length=255)


class RoleUpdate(BaseModel):
    """Partial role update; ``updated_at`` advances even when both are omitted."""

    name: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = Field(default=None, max_length=255)


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    role_id: int
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class RoleCreatedResponse(BaseModel):
    role_id: int


class RoleAssignmentRequest(BaseModel):
    """Body of the assign and revoke endpoints."""

    user_id: int = Field(gt=0)
    role_id: int = Field(gt=0)
