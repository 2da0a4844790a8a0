"""
Auth API Endpoints.

Web panel login and logout. The session token travels in an HttpOnly
cookie; there is no bearer-token flow.
"""

from fastapi import APIRouter, Response

from itdesk.backend.core.config import get_app_config
from itdesk.backend.core.dependencies import CurrentUser, DbSession
from itdesk.backend.core.security import create_session_token
from itdesk.backend.schemas.base import ApiResponse
from itdesk.backend.schemas.user import LoginRequest, UserResponse
from itdesk.backend.services.access import AccessControl
from itdesk.backend.services.user import UserService

router = APIRouter()


@router.post(
    "/login",
    response_model=ApiResponse[UserResponse],
    summary="Log in",
    description="Check credentials and set the session cookie.",
)
async def login(
    data: LoginRequest,
    response: Response,
    db: DbSession,
) -> ApiResponse[UserResponse]:
    user = await UserService(db).authenticate(data.username, data.password)
    cookie = get_app_config().application.session_cookie
    response.set_cookie(
        key=cookie.name,
        value=create_session_token(user.id),
        max_age=cookie.max_age_seconds,
        httponly=True,
        secure=cookie.secure,
        samesite="lax",
    )
    permissions = await AccessControl(db).permission_map(user.id)
    return ApiResponse(data=UserResponse.model_validate(user).model_copy(update={"permissions": permissions}))


@router.post(
    "/logout",
    response_model=ApiResponse[dict],
    summary="Log out",
    description="Clear the session cookie.",
)
async def logout(response: Response) -> ApiResponse[dict]:
    response.delete_cookie(get_app_config().application.session_cookie.name)
    return ApiResponse(data={"logged_out": True})


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Current user",
)
async def me(user: CurrentUser, db: DbSession) -> ApiResponse[UserResponse]:
    permissions = await AccessControl(db).permission_map(user.id)
    return ApiResponse(data=UserResponse.model_validate(user).model_copy(update={"permissions": permissions}))
