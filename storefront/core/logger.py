"""Logging configuration shared by the API, the CLI and Celery workers."""
import logging
import logging.config
from typing import Optional

from storefront.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    level = (level or settings.LOG_LEVEL).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"handlers": ["console"], "level": level},
            "loggers": {
                # SQL echo is controlled by DATABASE_ECHO, keep the engine quiet otherwise
                "sqlalchemy.engine": {"level": "WARNING"},
                "passlib": {"level": "ERROR"},
            },
        }
    )
