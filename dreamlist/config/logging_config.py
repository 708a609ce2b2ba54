"""
Logging setup shared by the API and the sync agent.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(debug: bool = False) -> int:
    """
    Configure root logging once and set the package log level.

    Args:
        debug: Log at DEBUG instead of INFO

    Returns:
        The level applied to the dreamlist loggers
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    # basicConfig is a no-op once handlers exist, so the package level is set directly
    logging.getLogger("dreamlist").setLevel(level)
    return level
