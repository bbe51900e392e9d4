"""Logging setup for applications embedding ec2kit.

The library itself only creates module-level loggers and never configures
handlers on import. Applications call :func:`configure_logging` once at
startup.
"""

import logging

from ec2kit.config.settings import Settings, get_settings
from ec2kit.constants import LOG_FORMAT


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging from settings.

    Args:
        settings: Settings to read ``log_level`` from. Defaults to the cached
            application settings.

    Example:
        >>> from ec2kit.log_config import configure_logging
        >>> configure_logging()
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    # botocore logs every request below WARNING
    if settings.log_level != "DEBUG":
        logging.getLogger("botocore").setLevel(logging.WARNING)
