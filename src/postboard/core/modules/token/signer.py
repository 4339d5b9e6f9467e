"""Stateless access token signing and verification.

Access tokens are HS256 JWTs carrying ``{_id, iat, exp}``. Verification is
purely local: signature first, then expiry against the signer's clock. There
is no database lookup, so an access token cannot be revoked before it expires.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt
import structlog

from postboard.core.modules.token.models import AccessToken, AccessTokenClaims
from postboard.errors import InvalidSignatureError, TokenExpiredError
from postboard.utils import now

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"


class TokenSigner:
    """Issues and verifies access tokens with a shared secret."""

    def __init__(self, secret: str, ttl: timedelta, clock: Callable[[], datetime] = now) -> None:
        if not secret:
            raise ValueError("Access token secret must not be empty")
        self._secret = secret
        self._ttl = ttl
        self._clock = clock

    def issue(self, user_id: UUID) -> AccessToken:
        issued_at = self._clock()
        payload = {
            "_id": str(user_id),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
        }
        return AccessToken(jwt.encode(payload, self._secret, algorithm=ALGORITHM))

    def decode(self, token: str) -> AccessTokenClaims:
        """Check the signature and expiry and return the claims.

        Raises:
            InvalidSignatureError: token is malformed or signed with another secret
            TokenExpiredError: the clock is at or past the embedded ``exp``
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"verify_exp": False, "verify_iat": False, "require": ["_id", "iat", "exp"]},
            )
            claims = AccessTokenClaims.model_validate(
                {
                    "_id": payload["_id"],
                    "iat": datetime.fromtimestamp(payload["iat"], UTC),
                    "exp": datetime.fromtimestamp(payload["exp"], UTC),
                }
            )
        except (jwt.InvalidTokenError, ValueError, TypeError) as e:
            logger.debug("access_token_rejected", reason=type(e).__name__)
            raise InvalidSignatureError from e

        # Expiry is checked against our own clock so it can be substituted in tests
        if self._clock() >= claims.expires_at:
            raise TokenExpiredError
        return claims

    def verify(self, token: str) -> UUID:
        """Return the user id carried by a valid, unexpired token."""
        return self.decode(token).user_id
