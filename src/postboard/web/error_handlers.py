import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from postboard.errors import (
    AccessDeniedError,
    AuthenticationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidSignatureError,
    NotFoundError,
    SessionNotFoundError,
    TokenExpiredError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first
AUTHENTICATION_ERROR_TYPES: list[tuple[type[AuthenticationError], str]] = [
    (InvalidSignatureError, "invalid_signature"),
    (TokenExpiredError, "token_expired"),
    (InvalidCredentialsError, "invalid_credentials"),
    (SessionNotFoundError, "session_not_found"),
]


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, AuthenticationError):
        status_code = 401
        error_type = next((t for cls, t in AUTHENTICATION_ERROR_TYPES if isinstance(exc, cls)), "authentication_error")
    elif isinstance(exc, AccessDeniedError):
        status_code = 403
        error_type = "access_denied"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, DuplicateEmailError):
        status_code = 400
        error_type = "duplicate_email"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def request_validation_error_handler(_: Request, exc: Exception) -> Response:
    """Report the first invalid request field as a 400 validation error."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    if not errors:
        return create_json_error_response(status_code=400, message="Invalid request", error_type="validation_error")

    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first['msg']}" if field else first["msg"]
    return create_json_error_response(status_code=400, message=message, error_type="validation_error")


async def persistence_error_handler(_: Request, exc: Exception) -> Response:
    """Handle storage failures (503)."""
    logger.error("Persistence error: %s", exc)
    return create_json_error_response(
        status_code=503, message="The database is temporarily unavailable.", error_type="persistence_error"
    )


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
