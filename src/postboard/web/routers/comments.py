"""Comment-related API endpoints."""

from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, Field

from postboard.core.modules.comment.models import Comment
from postboard.web.deps import AppDep, CurrentUserIdDep
from postboard.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["comments"])


class CreateCommentRequest(BaseModel):
    """Request to create a new comment."""

    name: str = Field(..., min_length=1, description="Display name of the commenter")
    body: str = Field(..., min_length=1, description="The comment text")


@router.get(
    "/posts/{post_id}/comments",
    summary="List post comments",
    description="Get all comments for a post in creation order.",
    operation_id="listComments",
)
async def list_comments(post_id: UUID, app: AppDep) -> list[Comment]:
    return await app.get_post_comments(post_id)


@router.post(
    "/posts/{post_id}/comments",
    summary="Create comment",
    operation_id="createComment",
    status_code=201,
    responses={
        201: {"description": "Comment created successfully"},
        401: {"model": ErrorResponse, "description": "Missing, invalid, or expired access token"},
        404: {"model": ErrorResponse, "description": "Post not found"},
    },
)
async def create_comment(post_id: UUID, request: CreateCommentRequest, app: AppDep, current_user_id: CurrentUserIdDep) -> Comment:
    return await app.create_comment(current_user_id, post_id, request.name, request.body)
