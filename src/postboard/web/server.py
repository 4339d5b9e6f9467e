from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from secrets import token_hex

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from postboard.app import App
from postboard.config import Config
from postboard.errors import PersistenceError, UserError
from postboard.logging import bind_request_context
from postboard.web.error_handlers import (
    general_exception_handler,
    persistence_error_handler,
    request_validation_error_handler,
    user_error_handler,
)
from postboard.web.openapi import set_custom_openapi
from postboard.web.routers import auth_router, comments_router, posts_router, users_router

TOKEN_HEADERS = ["x-access-token", "x-refresh-token"]

logger = structlog.get_logger(__name__)


async def log_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Bind per-request log context and log the outcome of each request."""
    structlog.contextvars.clear_contextvars()
    bind_request_context(request_id=token_hex(8), method=request.method, path=request.url.path)
    response = await call_next(request)
    logger.info("request_completed", status_code=response.status_code)
    return response


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        app.state.app = app_instance
        app.state.config = config
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="Postboard API",
        lifespan=lifespan,
    )

    app.middleware("http")(log_requests)

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*", "_id", *TOKEN_HEADERS],
            expose_headers=TOKEN_HEADERS,
        )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    # API v1 routes
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")
    app.include_router(posts_router, prefix="/api/v1")
    app.include_router(comments_router, prefix="/api/v1")

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
