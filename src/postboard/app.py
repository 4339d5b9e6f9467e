from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from pymongo.asynchronous.database import AsyncDatabase

from postboard.config import Config
from postboard.core.core import Core
from postboard.core.modules.access.models import SessionContext
from postboard.core.modules.auth.models import AuthResult
from postboard.core.modules.comment.models import Comment
from postboard.core.modules.post.models import Post
from postboard.core.modules.token.models import AccessToken
from postboard.core.modules.user.models import UserView


class App:
    """Facade for all application operations, checks identity before delegating to Core."""

    def __init__(self, config: Config, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._core = Core(config, database)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Auth gates ===
    def authenticate(self, access_token: str | None) -> UUID:
        """Resolve user id from an access token (stateless)."""
        return self._core.services.access.authenticate(access_token)

    async def verify_session(self, user_id: str | None, refresh_token: str | None) -> SessionContext:
        """Resolve a live session from user id and refresh token (stateful)."""
        return await self._core.services.access.verify_session(user_id, refresh_token)

    # === Sessions ===
    async def register(self, email: str, password: str) -> AuthResult:
        """Create user and open its first session."""
        return await self._core.services.auth.register(email, password)

    async def login(self, email: str, password: str) -> AuthResult:
        """Authenticate user and create session."""
        return await self._core.services.auth.login(email, password)

    def refresh_access_token(self, session: SessionContext) -> AccessToken:
        """Issue a fresh access token for a verified session."""
        return self._core.services.auth.refresh_access_token(session.user)

    async def logout(self, session: SessionContext) -> None:
        """Remove the presented session only."""
        await self._core.services.auth.logout(session.user_id, session.refresh_token)

    # === Users ===
    async def update_user(
        self, current_user_id: UUID, user_id: UUID, email: str | None = None, password: str | None = None
    ) -> UserView:
        """Update own email and/or password."""
        self._core.services.access.ensure_self(current_user_id, user_id)
        user = await self._core.services.user.update_user(user_id, email, password)
        return UserView.from_domain(user)

    # === Posts ===
    async def get_posts(self) -> list[Post]:
        return await self._core.services.post.list_posts()

    async def get_post(self, post_id: UUID) -> Post:
        return await self._core.services.post.get_post(post_id)

    async def create_post(self, current_user_id: UUID, title: str, body: str) -> Post:
        return await self._core.services.post.create_post(current_user_id, title, body)

    async def update_post(self, current_user_id: UUID, post_id: UUID, changes: dict[str, str]) -> Post:
        """Partially update a post (author only)."""
        await self._core.services.access.ensure_post_author(current_user_id, post_id)
        return await self._core.services.post.update_post(post_id, changes)

    async def delete_post(self, current_user_id: UUID, post_id: UUID) -> Post:
        """Delete a post and its comments (author only)."""
        await self._core.services.access.ensure_post_author(current_user_id, post_id)
        return await self._core.services.post.delete_post(post_id)

    # === Comments ===
    async def get_post_comments(self, post_id: UUID) -> list[Comment]:
        return await self._core.services.comment.get_post_comments(post_id)

    async def create_comment(self, current_user_id: UUID, post_id: UUID, name: str, body: str) -> Comment:
        return await self._core.services.comment.create_comment(post_id, current_user_id, name, body)
