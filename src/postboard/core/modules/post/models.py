from datetime import datetime
from uuid import UUID

from pydantic import Field

from postboard.core.db import MongoModel
from postboard.utils import now


class Post(MongoModel):
    """Blog post."""

    author_id: UUID
    title: str
    body: str
    created_at: datetime = Field(default_factory=now)
    edited_at: datetime | None = None  # Last update timestamp
