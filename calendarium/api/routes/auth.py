"""
Authentication API routes.

This module provides REST endpoints for:
- Login (opens a session)
- Logout (deactivates the session of the presented token)
- Session token refresh
- Current user with roles
- Listing and deleting the caller's sessions
"""

import logging

from fastapi import APIRouter, Request, status

from calendarium.api.dependencies import AuthServiceDep, AuthUser, Context
from calendarium.core.config import settings
from calendarium.core.rate_limit import limiter
from calendarium.core.security import extract_bearer_token
from calendarium.exceptions import SessionInvalidError
from calendarium.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RefreshResponse,
    RefreshTokenRequest,
    SessionResponse,
)
from calendarium.schemas.common import ApiResponse
from calendarium.schemas.role import RoleResponse
from calendarium.schemas.user import UserResponse, UserWithRoles

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Login with email and password",
    description="""
    Authenticate with email and password to open a session.

    Returns an opaque 64-character session token (valid one hour) and a
    refresh token. Unknown email and wrong password return the same
    `401 InvalidCredentials`.

    **Rate Limit:** Configurable via RATE_LIMIT_LOGIN
    """,
)
@limiter.limit(settings.rate_limit_login)
async def login(
    credentials: LoginRequest,
    request: Request,
    auth_service: AuthServiceDep,
) -> ApiResponse[LoginResponse]:
    result = await auth_service.login(
        email=credentials.email,
        password=credentials.password,
        device_info=request.headers.get("User-Agent"),
        ip_address=request.client.host if request.client else None,
    )

    return ApiResponse[LoginResponse](
        success=True,
        message="Login successful",
        data=LoginResponse(
            user=UserResponse.model_validate(result.user),
            session_token=result.session.session_token,
            refresh_token=result.session.refresh_token,
            expires_at=result.session.expires_at,
            roles=[RoleResponse.model_validate(role) for role in result.roles],
        ),
    )


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    summary="Logout",
    description="""
    Deactivate the session of the bearer token in the Authorization header.

    Logging out twice is not an error. A missing or malformed header
    returns `400 SessionInvalid`.
    """,
)
async def logout(request: Request, auth_service: AuthServiceDep) -> ApiResponse[None]:
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        logger.warning("Logout rejected: malformed Authorization header")
        raise SessionInvalidError(status_code=status.HTTP_400_BAD_REQUEST)

    await auth_service.logout(token)
    return ApiResponse[None](success=True, message="Logged out")


@router.post(
    "/refresh",
    response_model=ApiResponse[RefreshResponse],
    response_model_exclude_none=True,
    summary="Refresh session token",
    description="""
    Exchange a refresh token for a new session token on the same session.

    **Rate Limit:** Configurable via RATE_LIMIT_REFRESH
    """,
)
@limiter.limit(settings.rate_limit_refresh)
async def refresh(
    body: RefreshTokenRequest,
    request: Request,
    auth_service: AuthServiceDep,
) -> ApiResponse[RefreshResponse]:
    user_session = await auth_service.refresh(body.refresh_token)
    return ApiResponse[RefreshResponse](
        success=True,
        message="Session refreshed",
        data=RefreshResponse(
            session_token=user_session.session_token,
            expires_at=user_session.expires_at,
        ),
    )


@router.get(
    "/me",
    response_model=ApiResponse[UserWithRoles],
    response_model_exclude_none=True,
    summary="Get the authenticated user",
)
async def me(current_user: AuthUser, context: Context) -> ApiResponse[UserWithRoles]:
    """Return the caller and the roles loaded during authentication."""
    return ApiResponse[UserWithRoles](
        success=True,
        data=UserWithRoles(
            user=UserResponse.model_validate(current_user),
            roles=[RoleResponse.model_validate(role) for role in context.auth_roles],
        ),
    )


@router.get(
    "/sessions",
    response_model=ApiResponse[list[SessionResponse]],
    response_model_exclude_none=True,
    summary="List the caller's sessions",
    description="Newest first. Session tokens are masked and refresh tokens omitted.",
)
async def list_sessions(
    current_user: AuthUser,
    auth_service: AuthServiceDep,
) -> ApiResponse[list[SessionResponse]]:
    sessions = await auth_service.list_sessions(current_user.user_id)
    return ApiResponse[list[SessionResponse]](success=True, data=sessions)


@router.delete(
    "/sessions/{session_id}",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    summary="Delete one of the caller's sessions",
)
async def delete_session(
    session_id: str,
    current_user: AuthUser,
    auth_service: AuthServiceDep,
) -> ApiResponse[None]:
    """
    Soft-delete a session owned by the caller.

    Raises:
        404 SessionNotFound: Unknown id, someone else's session, or already deleted
    """
    await auth_service.delete_session(current_user.user_id, session_id)
    return ApiResponse[None](success=True, message="Session deleted")
