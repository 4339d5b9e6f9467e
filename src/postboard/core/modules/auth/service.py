from uuid import UUID

import structlog

from postboard.core.core import Service
from postboard.core.modules.auth.models import AuthResult
from postboard.core.modules.session.models import RefreshToken
from postboard.core.modules.token.models import AccessToken
from postboard.core.modules.user.models import User
from postboard.errors import InvalidCredentialsError

logger = structlog.get_logger(__name__)


class AuthService(Service):
    """Creates and invalidates sessions on login, registration, and logout."""

    async def login(self, email: str, password: str) -> AuthResult:
        """Verify credentials, then open a session and issue an access token."""
        user = await self.core.services.user.find_by_credentials(email, password)
        if user is None:
            logger.info("login_failed")
            raise InvalidCredentialsError
        return await self._open_session(user)

    async def register(self, email: str, password: str) -> AuthResult:
        """Create a user, then open its first session."""
        user = await self.core.services.user.create_user(email, password)
        return await self._open_session(user)

    def refresh_access_token(self, user: User) -> AccessToken:
        """Issue a new access token for a user whose session was already verified."""
        return self.core.token_signer.issue(user.id)

    async def logout(self, user_id: UUID, refresh_token: RefreshToken) -> None:
        await self.core.services.session.remove_session(user_id, refresh_token)

    async def _open_session(self, user: User) -> AuthResult:
        refresh_token = await self.core.services.session.create_session(user.id)
        access_token = self.core.token_signer.issue(user.id)
        return AuthResult(user=user, refresh_token=refresh_token, access_token=access_token)
