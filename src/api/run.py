"""Server entrypoint."""

from __future__ import annotations

import logging

import uvicorn

from src.config.settings import get_settings
from src.utils.error_handling import ConfigurationError

logger = logging.getLogger(__name__)


def main() -> None:
    """Start the uvicorn server.

    A single worker process is used so that all updates go through one job
    queue and writes to the bot branch stay serialized.
    """
    try:
        api = get_settings().api
        host, port = api.host, api.port
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Failed to load settings: {e}")
        raise SystemExit(1) from e

    uvicorn.run("src.api.main:app", host=host, port=port, workers=1)


if __name__ == "__main__":
    main()
