from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, Field

from postboard.core.modules.post.models import Post
from postboard.web.deps import AppDep, CurrentUserIdDep
from postboard.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["posts"])


class CreatePostRequest(BaseModel):
    """Request to create a new post."""

    title: str = Field(..., min_length=1, description="Post title")
    body: str = Field(..., description="Post body")


class UpdatePostRequest(BaseModel):
    """Partial post update. Only provided fields are changed."""

    title: str | None = Field(None, min_length=1, description="New title")
    body: str | None = Field(None, description="New body")


@router.get(
    "/posts",
    summary="List posts",
    description="Get all posts, newest first.",
    operation_id="listPosts",
)
async def list_posts(app: AppDep) -> list[Post]:
    return await app.get_posts()


@router.get(
    "/posts/{post_id}",
    summary="Get post",
    operation_id="getPost",
    responses={404: {"model": ErrorResponse, "description": "Post not found"}},
)
async def get_post(post_id: UUID, app: AppDep) -> Post:
    return await app.get_post(post_id)


@router.post(
    "/posts",
    summary="Create post",
    operation_id="createPost",
    status_code=201,
    responses={
        201: {"description": "Post created successfully"},
        401: {"model": ErrorResponse, "description": "Missing, invalid, or expired access token"},
    },
)
async def create_post(request: CreatePostRequest, app: AppDep, current_user_id: CurrentUserIdDep) -> Post:
    return await app.create_post(current_user_id, request.title, request.body)


@router.patch(
    "/posts/{post_id}",
    summary="Update post",
    description="Partially update a post. Only the author can update it.",
    operation_id="updatePost",
    responses={
        200: {"description": "Post updated successfully"},
        401: {"model": ErrorResponse, "description": "Missing, invalid, or expired access token"},
        403: {"model": ErrorResponse, "description": "Not the author of this post"},
        404: {"model": ErrorResponse, "description": "Post not found"},
    },
)
async def update_post(post_id: UUID, request: UpdatePostRequest, app: AppDep, current_user_id: CurrentUserIdDep) -> Post:
    return await app.update_post(current_user_id, post_id, request.model_dump(exclude_none=True))


@router.delete(
    "/posts/{post_id}",
    summary="Delete post",
    description="Delete a post and all its comments. Only the author can delete it. Returns the removed post.",
    operation_id="deletePost",
    responses={
        200: {"description": "Removed post"},
        401: {"model": ErrorResponse, "description": "Missing, invalid, or expired access token"},
        403: {"model": ErrorResponse, "description": "Not the author of this post"},
        404: {"model": ErrorResponse, "description": "Post not found"},
    },
)
async def delete_post(post_id: UUID, app: AppDep, current_user_id: CurrentUserIdDep) -> Post:
    return await app.delete_post(current_user_id, post_id)
