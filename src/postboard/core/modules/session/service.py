import secrets
from datetime import timedelta
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from postboard.core.core import Service
from postboard.core.db import persistence_errors
from postboard.core.modules.session.models import RefreshToken, Session
from postboard.core.modules.user.models import User
from postboard.errors import NotFoundError, SessionNotFoundError
from postboard.utils import now

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Stores refresh-token sessions embedded in user documents."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def on_start(self) -> None:
        """Create index for session token lookups."""
        await self._collection.create_index([("sessions.token", 1)])

    async def create_session(self, user_id: UUID) -> RefreshToken:
        """Append a new session to the user and return its refresh token."""
        refresh_token = RefreshToken(secrets.token_hex(64))
        ttl = timedelta(days=self.core.config.refresh_token_ttl_days)
        session = Session(token=refresh_token, expires_at=now() + ttl)

        # $push keeps concurrent logins for the same user from overwriting each other
        with persistence_errors():
            result = await self._collection.update_one({"_id": user_id}, {"$push": {"sessions": session.model_dump()}})
        if result.matched_count == 0:
            raise NotFoundError(f"User '{user_id}' not found")
        logger.info("session_created", user_id=str(user_id), expires_at=session.expires_at.isoformat())
        return refresh_token

    async def find_by_id_and_token(self, user_id: UUID, refresh_token: str) -> User:
        """Find the user owning the given session token. Expiry is not checked."""
        with persistence_errors():
            doc = await self._collection.find_one({"_id": user_id, "sessions.token": refresh_token})
        if doc is None:
            raise SessionNotFoundError
        return User.model_validate(doc)

    async def remove_session(self, user_id: UUID, refresh_token: str) -> None:
        """Remove exactly the session matching the token. No-op if absent."""
        with persistence_errors():
            result = await self._collection.update_one(
                {"_id": user_id}, {"$pull": {"sessions": {"token": refresh_token}}}
            )
        logger.info("session_removed", user_id=str(user_id), removed=result.modified_count)
