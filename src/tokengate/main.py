"""Application entry point for the tokengate server."""

import structlog

from tokengate.app import App
from tokengate.config import Config
from tokengate.logging import setup_logging
from tokengate.web.runner import run_server

logger = structlog.get_logger(__name__)


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    logger.info(
        "tokengate_starting",
        session_backend=config.session_backend,
        session_lifetime_seconds=config.session_lifetime_seconds,
        sweep_interval_seconds=config.sweep_interval_seconds,
    )
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
