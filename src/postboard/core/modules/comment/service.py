from typing import Any
from uuid import UUID

from pymongo.asynchronous.database import AsyncDatabase

from postboard.core.core import Service
from postboard.core.db import persistence_errors
from postboard.core.modules.comment.models import Comment


class CommentService(Service):
    """Manages comments on posts."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("comments")

    async def on_start(self) -> None:
        """Create index for post lookup."""
        await self._collection.create_index([("post_id", 1), ("created_at", 1)])

    async def get_post_comments(self, post_id: UUID) -> list[Comment]:
        """Get comments for a post in creation order."""
        with persistence_errors():
            cursor = self._collection.find({"post_id": post_id}).sort("created_at", 1)
            return await Comment.list_cursor(cursor)

    async def create_comment(self, post_id: UUID, author_id: UUID, name: str, body: str) -> Comment:
        """Add a comment to an existing post."""
        await self.core.services.post.get_post(post_id)
        comment = Comment(post_id=post_id, author_id=author_id, name=name, body=body)
        with persistence_errors():
            await self._collection.insert_one(comment.to_mongo())
        return comment

    async def delete_comments_by_post(self, post_id: UUID) -> int:
        """Delete all comments on a post and return count of deleted comments."""
        with persistence_errors():
            result = await self._collection.delete_many({"post_id": post_id})
        return result.deleted_count
