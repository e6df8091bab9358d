"""Logging configuration for the application.

This module provides centralized logging configuration.
Import `get_logger` to create loggers in other modules.
"""

import logging
import sys
from functools import lru_cache


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application.

    This should be called once at application startup.
    Configures the root logger and sets appropriate levels.

    Args:
        debug: Log the application modules at DEBUG instead of INFO
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,  # Override any existing configuration
    )

    logging.getLogger("mailrelay").setLevel(logging.DEBUG if debug else logging.INFO)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("python_multipart").setLevel(logging.WARNING)


@lru_cache(maxsize=None)
def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given module name.

    Args:
        name: The module name, typically __name__

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
