from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, Field

from postboard.core.modules.user.models import UserView
from postboard.web.deps import AppDep, CurrentUserIdDep
from postboard.web.openapi import ErrorResponse

router = APIRouter(tags=["users"])


class UpdateUserRequest(BaseModel):
    """Partial update of the current user. Unknown fields (including sessions) are ignored."""

    email: str | None = Field(None, min_length=1, description="New email address")
    password: str | None = Field(None, min_length=1, description="New password")


@router.patch(
    "/users/{user_id}",
    summary="Update user",
    description="Update email and/or password of the authenticated user.",
    operation_id="updateUser",
    responses={
        200: {"description": "Updated user"},
        400: {"model": ErrorResponse, "description": "Invalid fields or email already registered"},
        401: {"model": ErrorResponse, "description": "Missing, invalid, or expired access token"},
        403: {"model": ErrorResponse, "description": "Cannot modify another user"},
    },
)
async def update_user(user_id: UUID, request: UpdateUserRequest, app: AppDep, current_user_id: CurrentUserIdDep) -> UserView:
    return await app.update_user(current_user_id, user_id, request.email, request.password)
