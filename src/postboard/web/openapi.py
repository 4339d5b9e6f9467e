from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

# Operations reachable without any token
PUBLIC_ENDPOINTS = {
    ("POST", "/api/v1/users"),
    ("POST", "/api/v1/users/login"),
    ("GET", "/api/v1/posts"),
    ("GET", "/api/v1/posts/{post_id}"),
    ("GET", "/api/v1/posts/{post_id}/comments"),
    ("GET", "/health"),
}

# Operations gated by the refresh-token session instead of the access token
SESSION_ENDPOINTS = {
    ("GET", "/api/v1/users/me/access-token"),
    ("DELETE", "/api/v1/users/session"),
}


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="Postboard API",
            version="0.1.0",
            summary="Blog backend with access/refresh token sessions",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "AccessToken": {
                "type": "apiKey",
                "in": "header",
                "name": "x-access-token",
                "description": "Short-lived signed access token",
            },
            "RefreshToken": {
                "type": "apiKey",
                "in": "header",
                "name": "x-refresh-token",
                "description": "Opaque refresh token, sent together with the _id header",
            },
            "UserId": {
                "type": "apiKey",
                "in": "header",
                "name": "_id",
                "description": "ID of the user owning the refresh token",
            },
        }

        openapi_schema["security"] = [{"AccessToken": []}]

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                key = (method.upper(), path)
                if key in PUBLIC_ENDPOINTS:
                    operation["security"] = []
                elif key in SESSION_ENDPOINTS:
                    operation["security"] = [{"RefreshToken": [], "UserId": []}]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Invalid email or password", "type": "invalid_credentials"},
                {"message": "Access token has expired", "type": "token_expired"},
                {"message": "Refresh token has expired or the session is invalid", "type": "session_not_found"},
            ]
        }
    }
