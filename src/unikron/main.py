"""Main entry point - runs the API server."""

import logging

import uvicorn

from unikron.api.app import create_app
from unikron.config import get_settings

logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    settings = get_settings()

    # Configure logging
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info("Starting UNIKRON...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Aggregator: {settings.get_aggregator_url()} (wallet mode: {settings.wallet_mode})")

    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
