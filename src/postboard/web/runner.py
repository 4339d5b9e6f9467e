import uvicorn

from postboard.app import App
from postboard.config import Config
from postboard.web.server import create_fastapi_app


def run_server(app: App, config: Config) -> None:
    """Serve the API with uvicorn.

    Uvicorn's loggers propagate to the root handler installed by ``setup_logging``.
    Its access log is off because ``log_requests`` emits ``request_completed`` with
    the bound request context instead.
    """
    fastapi_app = create_fastapi_app(app, config)
    uvicorn.run(
        fastapi_app,
        host=config.host,
        port=config.port,
        log_config=None,
        log_level="debug" if config.debug else "info",
        access_log=False,
    )
