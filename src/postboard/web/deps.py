from typing import Annotated, cast
from uuid import UUID

from fastapi import Depends, Header, Request

from postboard.app import App
from postboard.core.modules.access.models import SessionContext
from postboard.logging import bind_request_context


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def authenticate(
    request: Request,
    app: Annotated[App, Depends(get_app)],
    x_access_token: Annotated[str | None, Header(description="Signed access token")] = None,
) -> UUID:
    """Stateless gate: verify the access token and resolve the user id."""
    user_id = app.authenticate(x_access_token)
    request.state.user_id = user_id
    bind_request_context(user_id=str(user_id))
    return user_id


async def verify_session(
    request: Request,
    app: Annotated[App, Depends(get_app)],
    x_refresh_token: Annotated[str | None, Header(description="Opaque refresh token")] = None,
    user_id: Annotated[str | None, Header(alias="_id", convert_underscores=False, description="Claimed user ID")] = None,
) -> SessionContext:
    """Stateful gate: verify the refresh token against the user's stored, unexpired sessions."""
    session = await app.verify_session(user_id, x_refresh_token)
    request.state.user_id = session.user_id
    bind_request_context(user_id=str(session.user_id))
    return session


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
CurrentUserIdDep = Annotated[UUID, Depends(authenticate)]
SessionDep = Annotated[SessionContext, Depends(verify_session)]
