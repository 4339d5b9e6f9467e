from uuid import UUID

from pydantic import BaseModel, Field

from postboard.core.db import MongoModel
from postboard.core.modules.session.models import Session


class User(MongoModel):
    """User domain model with credentials and embedded sessions."""

    email: str
    password_hash: str  # bcrypt hash
    sessions: list[Session] = Field(default_factory=list)

    def find_session(self, token: str) -> Session | None:
        """Return the session with the given refresh token, if any."""
        return next((s for s in self.sessions if s.token == token), None)


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="Email address")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, email=user.email)
