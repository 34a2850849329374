"""
Main application module for the Dockmon service.

Configures logging and builds the FastAPI application used by ``main.py``
and by ``uvicorn dockmon.app:app``.
"""

import logging

from fastapi import FastAPI

from .api import create_app
from .config import config

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.server.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_dockmon_app() -> FastAPI:
    """
    Create and initialize the Dockmon application.

    Returns:
        FastAPI: Application bound to the global configuration
    """
    app = create_app(config)
    logger.info(
        f"Dockmon configured: docker={config.docker.url} "
        f"containers={config.filters.describe_names()} states={config.filters.describe_states()}"
    )
    return app


app = create_dockmon_app()
