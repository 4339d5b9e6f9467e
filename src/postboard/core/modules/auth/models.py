from pydantic import BaseModel

from postboard.core.modules.session.models import RefreshToken
from postboard.core.modules.token.models import AccessToken
from postboard.core.modules.user.models import User


class AuthResult(BaseModel):
    """Outcome of a login or registration: the user and both freshly issued tokens."""

    user: User
    refresh_token: RefreshToken
    access_token: AccessToken
