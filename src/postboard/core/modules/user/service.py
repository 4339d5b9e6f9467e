from typing import Any
from uuid import UUID

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from postboard.core.core import Service
from postboard.core.db import persistence_errors
from postboard.core.modules.user.models import User
from postboard.core.modules.user.validators import normalize_email, validate_password
from postboard.errors import DuplicateEmailError, NotFoundError

logger = structlog.get_logger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


class UserService(Service):
    """Manages user accounts and credentials."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def on_start(self) -> None:
        """Create unique email index."""
        await self._collection.create_index([("email", 1)], unique=True)

    async def get_user(self, user_id: UUID) -> User:
        """Get user by ID."""
        with persistence_errors():
            doc = await self._collection.find_one({"_id": user_id})
        if doc is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return User.model_validate(doc)

    async def find_by_email(self, email: str) -> User | None:
        with persistence_errors():
            doc = await self._collection.find_one({"email": email.strip().lower()})
        return None if doc is None else User.model_validate(doc)

    async def has_email(self, email: str) -> bool:
        """Check if email is already registered."""
        return await self.find_by_email(email) is not None

    async def create_user(self, email: str, password: str) -> User:
        """Create user with hashed password."""
        email = normalize_email(email)
        validate_password(password)
        if await self.has_email(email):
            raise DuplicateEmailError(email)

        user = User(email=email, password_hash=hash_password(password))
        with persistence_errors():
            try:
                await self._collection.insert_one(user.to_mongo())
            except DuplicateKeyError as e:
                # Lost a race with a concurrent registration for the same email
                raise DuplicateEmailError(email) from e
        logger.info("user_registered", user_id=str(user.id))
        return user

    async def find_by_credentials(self, email: str, password: str) -> User | None:
        """Return the user if the password matches its stored hash."""
        user = await self.find_by_email(email)
        if user is None or not check_password(password, user.password_hash):
            return None
        return user

    async def update_user(self, user_id: UUID, email: str | None = None, password: str | None = None) -> User:
        """Update email and/or password. Sessions are never touched here."""
        patch: dict[str, Any] = {}
        if email is not None:
            email = normalize_email(email)
            existing = await self.find_by_email(email)
            if existing is not None and existing.id != user_id:
                raise DuplicateEmailError(email)
            patch["email"] = email
        if password is not None:
            validate_password(password)
            patch["password_hash"] = hash_password(password)

        if patch:
            with persistence_errors():
                try:
                    result = await self._collection.update_one({"_id": user_id}, {"$set": patch})
                except DuplicateKeyError as e:
                    raise DuplicateEmailError(patch["email"]) from e
            if result.matched_count == 0:
                raise NotFoundError(f"User '{user_id}' not found")
            logger.info("user_updated", user_id=str(user_id), fields=sorted(patch))
        return await self.get_user(user_id)
