"""
Name: Utility functions.
Description: Common utility functions for openapi-mcp, including logging configuration, environment setup, and command-line list parsing.
"""

import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False):
    """Configure logging for the application.

    Logs go to stderr because stdout carries the MCP stdio transport.

    Args:
        debug: Whether to enable debug mode
    """
    logging_level = logging.DEBUG if debug else logging.INFO
    root_logger = logging.getLogger()
    root_logger.setLevel(logging_level)

    # Check if handlers are already configured to prevent duplicates
    if root_logger.handlers:
        for handler in root_logger.handlers:
            if isinstance(handler, logging.StreamHandler):
                handler.setLevel(logging_level)
        return

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    console_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)


def setup_environment(debug: bool = False):
    """Setup the environment for the application.

    - Configures logging
    - Loads environment variables from .env file
    """
    configure_logging(debug)

    load_dotenv()
    logger.debug("Loaded environment variables from .env file")


def sanitize_args(value: Optional[str]) -> List[str]:
    """Split a comma-separated command-line value into a clean list.

    Args:
        value: Raw option value, e.g. ``" one, two ,,three"``

    Returns:
        The trimmed, non-empty items
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
