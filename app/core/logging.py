"""Logging setup for the application."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQL echo is too noisy for the application log
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
