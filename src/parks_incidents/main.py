"""
Parks Incident Desk - reference API launcher.

Builds the FastAPI application once per process and runs it with uvicorn.
"""

from functools import lru_cache
from typing import Any

import uvicorn
from fastapi import FastAPI

from .api.app import create_app
from .config import get_logger, get_settings


@lru_cache
def get_application() -> FastAPI:
    """
    Create the FastAPI application instance.

    Returns:
        FastAPI: Configured application instance, shared by every caller
    """
    return create_app()


def get_server_config(host: str | None = None, port: int | None = None, reload: bool = False) -> dict[str, Any]:
    """
    Get uvicorn configuration.

    Reload mode needs an import string, so the app is passed as a factory path
    then; otherwise the already-built instance is served.
    """
    settings = get_settings()

    config: dict[str, Any] = {
        "host": host or settings.api_host,
        "port": port or settings.api_port,
        "log_level": "debug" if settings.debug else "info",
        "server_header": False,
        "log_config": None,
    }
    if reload:
        config.update({"reload": True, "factory": True, "reload_dirs": ["src"]})
    return config


def run_server(host: str | None = None, port: int | None = None, reload: bool = False) -> None:
    """Run the reference incidents API until interrupted."""
    logger = get_logger("app.server")
    config = get_server_config(host, port, reload)

    logger.info("Starting incidents API server", host=config["host"], port=config["port"], reload=reload)

    target: Any = "parks_incidents.main:get_application" if reload else get_application()
    uvicorn.run(target, **config)
