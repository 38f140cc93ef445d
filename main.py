"""
Adapter gateway entry point.
"""

import sys

import uvicorn
from loguru import logger

from gateway.app import create_app
from gateway.logging import configure_logging
from gateway.services.errors import ConfigurationError
from gateway.settings import load_settings


def main() -> None:
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(f"Invalid settings, refusing to start: {e}")
        sys.exit(1)

    configure_logging(settings.log_level)
    logger.info("Starting adapter gateway...")

    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.error(f"Invalid adapter configuration, refusing to start: {e}")
        sys.exit(1)

    logger.info(f"Serving on http://{settings.host}:{settings.port}")
    logger.info(f"API docs available at http://{settings.host}:{settings.port}/docs")
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    logger.info("Adapter gateway stopped")


if __name__ == "__main__":
    main()
