# app/utils/my_logging.py
"""Logging configuration"""
import logging
import sys
from typing import Optional

from app.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Library loggers that drown out booking events in quiet mode
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic",
    "celery",
    "kombu",
    "uvicorn.access",
)


def setup_logging(verbose=True, level: Optional[str] = None):
    """
    Configure application logging.

    Quiet mode (verbose=False) raises the root level to WARNING and mutes
    library chatter, but the "app" logger tree keeps the configured level so
    compensation and audit-retry messages are never lost.
    """
    settings = get_settings()
    level_name = (level or settings.LOG_LEVEL).upper()
    app_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=app_level if verbose else logging.WARNING,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    logging.getLogger("app").setLevel(app_level)

    if not verbose:
        for name in NOISY_LOGGERS:
            noisy = logging.getLogger(name)
            noisy.setLevel(logging.ERROR)
            noisy.propagate = False
