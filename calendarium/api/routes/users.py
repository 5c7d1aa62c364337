"""
User management API routes.

This module provides:
- POST /user - Sign up (public)
- GET|PUT|DELETE /user/me - The authenticated user's own account
- GET|PUT|DELETE /user/{user_id} - Any account (admin only)
- GET /user/{user_id}/with-roles - An account and its roles (admin only)
"""

import logging

from fastapi import APIRouter, Request, status

from calendarium.api.dependencies import AdminUser, AuthUser, ResolvedUser, UserServiceDep
from calendarium.core.config import settings
from calendarium.core.rate_limit import limiter
from calendarium.models.user import User
from calendarium.schemas.common import ApiResponse
from calendarium.schemas.role import RoleResponse
from calendarium.schemas.user import (
    UserCreate,
    UserCreatedResponse,
    UserResponse,
    UserUpdate,
    UserWithRoles,
)
from calendarium.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["Users"])


@router.post(
    "",
    response_model=ApiResponse[UserCreatedResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    description="""
    Create an account. The password must have at least 6 characters and
    the email must not belong to another live account. The new user is
    given the `user` role.

    **Rate Limit:** Configurable via RATE_LIMIT_SIGNUP
    """,
)
@limiter.limit(settings.rate_limit_signup)
async def create_user(
    user_data: UserCreate,
    request: Request,
    user_service: UserServiceDep,
) -> ApiResponse[UserCreatedResponse]:
    user = await user_service.create_user(user_data)
    return ApiResponse[UserCreatedResponse](
        success=True,
        message="User created",
        data=UserCreatedResponse(user_id=user.user_id),
    )


# ============================================================================
# Own Account
# ============================================================================


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    response_model_exclude_none=True,
    summary="Get current user profile",
)
async def get_current_user_profile(current_user: AuthUser) -> ApiResponse[UserResponse]:
    return ApiResponse[UserResponse](success=True, data=UserResponse.model_validate(current_user))


@router.put(
    "/me",
    response_model=ApiResponse[UserResponse],
    response_model_exclude_none=True,
    summary="Update current user profile",
)
async def update_current_user_profile(
    update_data: UserUpdate,
    current_user: AuthUser,
    user_service: UserServiceDep,
) -> ApiResponse[UserResponse]:
    """
    Update the caller's own account.

    Raises:
        - 400 InvalidEmailFormat / PasswordTooShort
        - 409 UserAlreadyExists: Email used by another live account
    """
    user = await user_service.update_user(current_user, update_data)
    return ApiResponse[UserResponse](
        success=True,
        message="User updated",
        data=UserResponse.model_validate(user),
    )


@router.delete(
    "/me",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    summary="Delete current user",
    description="Soft-deletes the account and its passwords and ends all its sessions.",
)
async def delete_current_user(
    current_user: AuthUser,
    user_service: UserServiceDep,
) -> ApiResponse[None]:
    await user_service.delete_user(current_user)
    return ApiResponse[None](success=True, message="User deleted")


# ============================================================================
# Admin: Any Account
# ============================================================================


async def _with_roles(user_service: UserService, user: User) -> UserWithRoles:
    roles = await user_service.get_roles(user)
    return UserWithRoles(
        user=UserResponse.model_validate(user),
        roles=[RoleResponse.model_validate(role) for role in roles],
    )


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    response_model_exclude_none=True,
    summary="Get a user (admin)",
)
async def get_user(admin: AdminUser, user: ResolvedUser) -> ApiResponse[UserResponse]:
    return ApiResponse[UserResponse](success=True, data=UserResponse.model_validate(user))


@router.get(
    "/{user_id}/with-roles",
    response_model=ApiResponse[UserWithRoles],
    response_model_exclude_none=True,
    summary="Get a user and their roles (admin)",
)
async def get_user_with_roles(
    admin: AdminUser,
    user: ResolvedUser,
    user_service: UserServiceDep,
) -> ApiResponse[UserWithRoles]:
    return ApiResponse[UserWithRoles](success=True, data=await _with_roles(user_service, user))


@router.put(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    response_model_exclude_none=True,
    summary="Update a user (admin)",
)
async def update_user(
    update_data: UserUpdate,
    admin: AdminUser,
    user: ResolvedUser,
    user_service: UserServiceDep,
) -> ApiResponse[UserResponse]:
    user = await user_service.update_user(user, update_data)
    logger.info(f"User {user.user_id} updated by admin {admin.user_id}")
    return ApiResponse[UserResponse](
        success=True,
        message="User updated",
        data=UserResponse.model_validate(user),
    )


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    summary="Delete a user (admin)",
)
async def delete_user(
    admin: AdminUser,
    user: ResolvedUser,
    user_service: UserServiceDep,
) -> ApiResponse[None]:
    await user_service.delete_user(user)
    logger.info(f"User {user.user_id} deleted by admin {admin.user_id}")
    return ApiResponse[None](success=True, message="User deleted")
