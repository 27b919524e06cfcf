"""Logging setup for the API process."""

import logging
import sys

from formintake.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = None) -> None:
    """Configure the root logger once for the whole application."""
    settings = get_settings()
    level_name = (level or settings.log_level).upper()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))

    # Suppress noisy third-party loggers
    for name in ("openai._base_client", "httpx", "httpcore", "multipart"):
        logging.getLogger(name).setLevel(logging.WARNING)
