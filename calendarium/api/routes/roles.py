"""
Role administration API routes.

Every endpoint requires the ``admin`` role.

This module provides:
- GET /roles - List roles
- POST /roles - Create a role
- GET|PUT|DELETE /roles/{role_id} - Read, update, delete a role
- POST /roles/assign - Give a role to a user
- POST /roles/revoke - Take a role from a user
- GET /roles/user/{user_id} - Roles of a user
"""

import logging

from fastapi import APIRouter, Depends, status

from calendarium.api.dependencies import ResolvedUser, RoleServiceDep, require_admin
from calendarium.schemas.common import ApiResponse
from calendarium.schemas.role import (
    RoleAssignmentRequest,
    RoleCreate,
    RoleCreatedResponse,
    RoleResponse,
    RoleUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/roles", tags=["Roles"], dependencies=[Depends(require_admin)])


@router.get(
    "",
    response_model=ApiResponse[list[RoleResponse]],
    response_model_exclude_none=True,
    summary="List roles",
)
async def list_roles(role_service: RoleServiceDep) -> ApiResponse[list[RoleResponse]]:
    roles = await role_service.list_roles()
    return ApiResponse[list[RoleResponse]](
        success=True,
        data=[RoleResponse.model_validate(role) for role in roles],
    )


@router.post(
    "",
    response_model=ApiResponse[RoleCreatedResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create a role",
)
async def create_role(
    role_data: RoleCreate,
    role_service: RoleServiceDep,
) -> ApiResponse[RoleCreatedResponse]:
    role = await role_service.create_role(role_data)
    return ApiResponse[RoleCreatedResponse](
        success=True,
        message="Role created",
        data=RoleCreatedResponse(role_id=role.role_id),
    )


@router.post(
    "/assign",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Assign a role to a user",
)
async def assign_role(
    assignment: RoleAssignmentRequest,
    role_service: RoleServiceDep,
) -> ApiResponse[None]:
    """
    Raises:
        - 404 UserNotFound / RoleNotFound
        - 409 RoleAlreadyAssigned
    """
    await role_service.assign_role(assignment.user_id, assignment.role_id)
    return ApiResponse[None](success=True, message="Role assigned")


@router.post(
    "/revoke",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    summary="Revoke a role from a user",
)
async def revoke_role(
    assignment: RoleAssignmentRequest,
    role_service: RoleServiceDep,
) -> ApiResponse[None]:
    await role_service.revoke_role(assignment.user_id, assignment.role_id)
    return ApiResponse[None](success=True, message="Role revoked")


@router.get(
    "/user/{user_id}",
    response_model=ApiResponse[list[RoleResponse]],
    response_model_exclude_none=True,
    summary="List the roles of a user",
)
async def get_user_roles(
    user: ResolvedUser,
    role_service: RoleServiceDep,
) -> ApiResponse[list[RoleResponse]]:
    roles = await role_service.get_user_roles(user.user_id)
    return ApiResponse[list[RoleResponse]](
        success=True,
        data=[RoleResponse.model_validate(role) for role in roles],
    )


@router.get(
    "/{role_id}",
    response_model=ApiResponse[RoleResponse],
    response_model_exclude_none=True,
    summary="Get a role",
)
async def get_role(role_id: str, role_service: RoleServiceDep) -> ApiResponse[RoleResponse]:
    role = await role_service.get_role(role_id)
    return ApiResponse[RoleResponse](success=True, data=RoleResponse.model_validate(role))


@router.put(
    "/{role_id}",
    response_model=ApiResponse[RoleResponse],
    response_model_exclude_none=True,
    summary="Update a role",
)
async def update_role(
    role_id: str,
    role_data: RoleUpdate,
    role_service: RoleServiceDep,
) -> ApiResponse[RoleResponse]:
    role = await role_service.update_role(role_id, role_data)
    return ApiResponse[RoleResponse](
        success=True,
        message="Role updated",
        data=RoleResponse.model_validate(role),
    )


@router.delete(
    "/{role_id}",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    summary="Delete a role",
    description="Soft-deletes the role, then its assignments.",
)
async def delete_role(role_id: str, role_service: RoleServiceDep) -> ApiResponse[None]:
    await role_service.delete_role(role_id)
    return ApiResponse[None](success=True, message="Role deleted")
