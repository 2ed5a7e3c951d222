# backend/app/core/logging_config.py

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "INFO") -> None:
    """Configure root logging to stdout."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
