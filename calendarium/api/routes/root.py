"""
Root Endpoints
"""

import logging
from typing import Any

from fastapi import APIRouter

from calendarium.api.dependencies import OptionalUser
from calendarium.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Root"])


@router.get("/")
async def root(current_user: OptionalUser) -> dict[str, Any]:
    """
    Root endpoint.

    Authentication is optional; a valid bearer token adds the caller's id.

    Returns:
        Welcome message with API information
    """
    body: dict[str, Any] = {
        "message": f"Welcome to {settings.app_name} API",
        "version": settings.version,
        "docs": "/docs" if settings.debug else "disabled",
        "health": "/health",
    }
    if current_user is not None:
        body["user_id"] = current_user.user_id
    return body
