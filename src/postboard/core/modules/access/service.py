from uuid import UUID

import structlog

from postboard.core.core import Service
from postboard.core.modules.access.models import SessionContext
from postboard.core.modules.session.models import RefreshToken
from postboard.errors import AccessDeniedError, AuthenticationError, PersistenceError, SessionNotFoundError
from postboard.utils import now

logger = structlog.get_logger(__name__)


class AccessService(Service):
    """Request-time checks for both token kinds.

    ``authenticate`` is stateless and only checks the access token signature and
    expiry. ``verify_session`` looks the refresh token up in the user's stored
    sessions and rejects it once ``expires_at`` has passed. Expired sessions are
    not removed here; only logout deletes them.
    """

    def authenticate(self, access_token: str | None) -> UUID:
        """Resolve the user id from an access token."""
        if not access_token:
            raise AuthenticationError("Missing access token")
        return self.core.token_signer.verify(access_token)

    async def verify_session(self, user_id: str | None, refresh_token: str | None) -> SessionContext:
        """Resolve a live session from a claimed user id and refresh token."""
        if not user_id or not refresh_token:
            raise SessionNotFoundError
        try:
            parsed_id = UUID(user_id)
        except ValueError as e:
            raise SessionNotFoundError from e

        try:
            user = await self.core.services.session.find_by_id_and_token(parsed_id, refresh_token)
        except PersistenceError as e:
            logger.warning("session_lookup_failed", error=str(e))
            raise AuthenticationError("Unable to verify session") from e

        session = user.find_session(refresh_token)
        if session is None or session.is_expired(now()):
            raise SessionNotFoundError("Refresh token has expired or the session is invalid")

        return SessionContext(user_id=user.id, user=user, refresh_token=RefreshToken(refresh_token))

    def ensure_self(self, current_user_id: UUID, target_user_id: UUID) -> None:
        """Ensure the authenticated user is acting on their own account."""
        if current_user_id != target_user_id:
            raise AccessDeniedError("Cannot modify another user")

    async def ensure_post_author(self, current_user_id: UUID, post_id: UUID) -> None:
        """Ensure the authenticated user wrote the post."""
        post = await self.core.services.post.get_post(post_id)
        if post.author_id != current_user_id:
            raise AccessDeniedError("Only the author can modify this post")
