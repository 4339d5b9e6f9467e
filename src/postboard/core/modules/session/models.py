"""Refresh-token session models."""

from datetime import UTC, datetime
from typing import NewType

from pydantic import BaseModel, field_validator

from postboard.utils import now

RefreshToken = NewType("RefreshToken", str)


class Session(BaseModel):
    """One authenticated device, embedded in the owning user's ``sessions`` list.

    ``expires_at`` is fixed at creation and never renewed. Expired sessions are
    kept until an explicit logout removes them.
    """

    token: str
    expires_at: datetime

    @field_validator("expires_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive datetimes come back from MongoDB as UTC
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)

    def is_expired(self, at: datetime | None = None) -> bool:
        return (at or now()) >= self.expires_at
