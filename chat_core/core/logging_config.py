"""
Logging setup for processes embedding the message state core.
"""
import logging
import sys

from chat_core.config import settings

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
JSON_FORMAT = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'


def setup_logging() -> None:
    """Configure the root logger from settings.log_level and settings.log_format."""
    log_format = JSON_FORMAT if settings.log_format.lower() == "json" else TEXT_FORMAT

    logging.basicConfig(
        format=log_format,
        stream=sys.stdout,
        level=settings.log_level.upper(),
    )

    # SQL echo is controlled by settings.debug on the engine itself
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
