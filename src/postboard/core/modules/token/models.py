"""Access token claims."""

from datetime import datetime
from typing import NewType
from uuid import UUID

from pydantic import BaseModel, Field

AccessToken = NewType("AccessToken", str)


class AccessTokenClaims(BaseModel):
    """Claims embedded in a signed access token. Never persisted."""

    user_id: UUID = Field(alias="_id")
    issued_at: datetime = Field(alias="iat")
    expires_at: datetime = Field(alias="exp")
