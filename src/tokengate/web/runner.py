"""Uvicorn entry for the tokengate API."""

import copy

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from tokengate.app import App
from tokengate.config import Config
from tokengate.web.server import create_fastapi_app


def run_server(app: App, config: Config) -> None:
    """Serve the API, with uvicorn's own loggers following the debug flag."""
    fastapi_app = create_fastapi_app(app, config)
    log_level = "debug" if config.debug else "info"

    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        log_config["loggers"][logger_name]["level"] = log_level.upper()

    uvicorn.run(
        fastapi_app,
        host=config.host,
        port=config.port,
        log_config=log_config,
        log_level=log_level,
        access_log=True,
    )
