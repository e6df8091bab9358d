"""Command-line entry point: ``mailrelay`` or ``python -m mailrelay``."""

import sys

import uvicorn
from pydantic import ValidationError

from mailrelay.config import get_settings
from mailrelay.utils.logging import configure_logging, get_logger

logger = get_logger("mailrelay")


def main() -> None:
    """Load configuration and serve the app on the configured listen address.

    Exits with status 1 if required configuration is missing or invalid.
    """
    configure_logging()

    try:
        settings = get_settings()
    except ValidationError as e:
        missing = ", ".join(
            str(error["loc"][0]).upper() for error in e.errors() if error["loc"]
        )
        logger.critical(f"Invalid configuration: {missing or e}")
        sys.exit(1)

    logger.info(f"Starting {settings.app_name} on {settings.listen_address}")
    uvicorn.run(
        "mailrelay.main:app",
        host=settings.listen_host,
        port=settings.listen_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
