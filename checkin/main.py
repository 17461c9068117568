"""
Main entry point for the check-in service.
"""

import logging

import uvicorn

from checkin.api.app import create_app
from checkin.utils.config import get_config
from checkin.utils.log_setup import configure_logging

logger = logging.getLogger(__name__)


def main() -> int:
    """Load configuration, set up logging and serve until interrupted."""
    try:
        config = get_config()
    except ValueError as e:
        print(f"Failed to start check-in service: {e}")
        return 1

    configure_logging(config.log_level)
    logger.info(f"Check-in service listening on {config.host}:{config.port}")

    uvicorn.run(create_app(config), host=config.host, port=config.port, log_level=config.log_level.lower())
    return 0


if __name__ == "__main__":
    exit(main())
