from datetime import datetime
from uuid import UUID

from pydantic import Field

from postboard.core.db import MongoModel
from postboard.utils import now


class Comment(MongoModel):
    """Comment on a post."""

    post_id: UUID
    author_id: UUID
    name: str  # Display name of the commenter
    body: str
    created_at: datetime = Field(default_factory=now)
