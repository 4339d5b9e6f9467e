from uuid import UUID

from pydantic import BaseModel

from postboard.core.modules.session.models import RefreshToken
from postboard.core.modules.user.models import User


class SessionContext(BaseModel):
    """Identity resolved from a verified refresh-token session."""

    user_id: UUID
    user: User
    refresh_token: RefreshToken
