"""Application entry point for Postboard backend server."""

from postboard.app import App
from postboard.config import Config
from postboard.logging import setup_logging
from postboard.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
