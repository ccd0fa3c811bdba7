"""Logging setup for processes embedding the scheduling core."""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Apply the standard log format; level defaults to the configured one."""
    if level is None:
        from .config import get_settings

        level = get_settings().log_level

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
