"""Logging setup."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
