from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from postboard.core.modules.auth.models import AuthResult
from postboard.core.modules.user.models import UserView
from postboard.web.deps import AppDep, SessionDep
from postboard.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class CredentialsRequest(BaseModel):
    """Email and password."""

    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class AccessTokenResponse(BaseModel):
    """Freshly issued access token."""

    access_token: str = Field(..., description="Signed access token, also returned in the x-access-token header")


def _set_token_headers(response: Response, result: AuthResult) -> None:
    response.headers["x-refresh-token"] = result.refresh_token
    response.headers["x-access-token"] = result.access_token


@router.post(
    "/users",
    summary="Register user",
    description="Create a new account and open its first session. Tokens are returned in response headers.",
    operation_id="register",
    status_code=201,
    responses={
        201: {"description": "User created, x-access-token and x-refresh-token headers set"},
        400: {"model": ErrorResponse, "description": "Invalid fields or email already registered"},
    },
)
async def register(request: CredentialsRequest, app: AppDep, response: Response) -> UserView:
    result = await app.register(request.email, request.password)
    _set_token_headers(response, result)
    return UserView.from_domain(result.user)


@router.post(
    "/users/login",
    summary="Authenticate user",
    description="Authenticate with email and password. Tokens are returned in response headers.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated, x-access-token and x-refresh-token headers set"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(request: CredentialsRequest, app: AppDep, response: Response) -> UserView:
    result = await app.login(request.email, request.password)
    _set_token_headers(response, result)
    return UserView.from_domain(result.user)


@router.get(
    "/users/me/access-token",
    summary="Refresh access token",
    description="Issue a new access token for a valid refresh-token session.",
    operation_id="refreshAccessToken",
    responses={
        200: {"description": "New access token, also set in the x-access-token header"},
        401: {"model": ErrorResponse, "description": "Session not found or expired"},
    },
)
async def refresh_access_token(app: AppDep, session: SessionDep, response: Response) -> AccessTokenResponse:
    access_token = app.refresh_access_token(session)
    response.headers["x-access-token"] = access_token
    return AccessTokenResponse(access_token=access_token)


@router.delete(
    "/users/session",
    summary="End session",
    description="Remove the session identified by the presented refresh token. Other sessions stay active.",
    operation_id="logout",
    status_code=204,
    responses={
        204: {"description": "Successfully logged out"},
        401: {"model": ErrorResponse, "description": "Session not found or expired"},
    },
)
async def logout(app: AppDep, session: SessionDep) -> None:
    await app.logout(session)
