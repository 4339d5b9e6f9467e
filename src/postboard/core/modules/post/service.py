from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from postboard.core.core import Service
from postboard.core.db import persistence_errors
from postboard.core.modules.post.models import Post
from postboard.errors import NotFoundError, ValidationError
from postboard.utils import now

logger = structlog.get_logger(__name__)

EDITABLE_FIELDS = frozenset({"title", "body"})


class PostService(Service):
    """CRUD for blog posts."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("posts")

    async def on_start(self) -> None:
        await self._collection.create_index([("created_at", -1)])

    async def list_posts(self) -> list[Post]:
        """Get all posts, newest first."""
        with persistence_errors():
            return await Post.list_cursor(self._collection.find({}).sort("created_at", -1))

    async def get_post(self, post_id: UUID) -> Post:
        with persistence_errors():
            doc = await self._collection.find_one({"_id": post_id})
        if doc is None:
            raise NotFoundError(f"Post '{post_id}' not found")
        return Post.model_validate(doc)

    async def create_post(self, author_id: UUID, title: str, body: str) -> Post:
        post = Post(author_id=author_id, title=title, body=body)
        with persistence_errors():
            await self._collection.insert_one(post.to_mongo())
        logger.debug("post_created", post_id=str(post.id))
        return post

    async def update_post(self, post_id: UUID, changes: dict[str, str]) -> Post:
        """Partially update title and/or body."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        with persistence_errors():
            doc = await self._collection.find_one_and_update(
                {"_id": post_id},
                {"$set": {**changes, "edited_at": now()}},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise NotFoundError(f"Post '{post_id}' not found")
        return Post.model_validate(doc)

    async def delete_post(self, post_id: UUID) -> Post:
        """Delete a post with its comments and return the removed post."""
        with persistence_errors():
            doc = await self._collection.find_one_and_delete({"_id": post_id})
        if doc is None:
            raise NotFoundError(f"Post '{post_id}' not found")
        deleted_comments = await self.core.services.comment.delete_comments_by_post(post_id)
        logger.debug("post_deleted", post_id=str(post_id), deleted_comments=deleted_comments)
        return Post.model_validate(doc)
