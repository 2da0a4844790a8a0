"""
User Administration API Endpoints.

Admin-only listing, role and permission changes, and deletion.
"""

from fastapi import APIRouter

from itdesk.backend.core.dependencies import AdminUser, DbSession
from itdesk.backend.schemas.base import ApiResponse
from itdesk.backend.schemas.user import (
    PermissionsUpdate,
    RoleUpdate,
    UserDeletionResponse,
    UserResponse,
)
from itdesk.backend.services.user import UserService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[UserResponse]],
    summary="List users",
    description="All users, newest first, each with the full permission map.",
)
async def list_users(db: DbSession, admin: AdminUser) -> ApiResponse[list[UserResponse]]:
    rows = await UserService(db).list_users()
    return ApiResponse(
        data=[
            UserResponse.model_validate(user).model_copy(update={"permissions": permissions})
            for user, permissions in rows
        ]
    )


@router.patch(
    "/{user_id}/role",
    response_model=ApiResponse[UserResponse],
    summary="Change role",
    description="Changes the role only; stored permissions are kept.",
)
async def update_role(
    user_id: int,
    data: RoleUpdate,
    db: DbSession,
    admin: AdminUser,
) -> ApiResponse[UserResponse]:
    service = UserService(db)
    user = await service.update_role(user_id, data.role)
    permissions = await service.access.permission_map(user.id)
    return ApiResponse(data=UserResponse.model_validate(user).model_copy(update={"permissions": permissions}))


@router.patch(
    "/{user_id}/permissions",
    response_model=ApiResponse[UserResponse],
    summary="Change permissions",
    description="Sets the provided category flags; omitted categories are unchanged.",
)
async def update_permissions(
    user_id: int,
    data: PermissionsUpdate,
    db: DbSession,
    admin: AdminUser,
) -> ApiResponse[UserResponse]:
    service = UserService(db)
    permissions = await service.update_permissions(user_id, data.as_mapping())
    user = await service.get_user(user_id)
    return ApiResponse(data=UserResponse.model_validate(user).model_copy(update={"permissions": permissions}))


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[UserDeletionResponse],
    summary="Delete user",
    description=(
        "Deletes the user with their secure notes, history rows, permissions, "
        "comments and created tasks. Tasks and equipment assigned to them are unassigned."
    ),
)
async def delete_user(user_id: int, db: DbSession, admin: AdminUser) -> ApiResponse[UserDeletionResponse]:
    summary = await UserService(db).delete_user(user_id)
    return ApiResponse(data=UserDeletionResponse(**summary.as_dict()))
