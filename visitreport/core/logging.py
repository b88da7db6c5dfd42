"""Logging setup shared by the API process and one-off scheduler runs."""
import logging
from typing import Optional

from visitreport.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Initialize root logging; defaults to LOG_LEVEL (DEBUG outside production)."""
    if level is None:
        level = settings.log_level if settings.environment == "production" else "DEBUG"
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
