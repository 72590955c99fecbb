"""Logging setup for the Echo service."""

from __future__ import annotations

import logging
import logging.config

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single console handler on the root logger.

    Safe to call more than once; later calls replace the configuration.
    """
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"handlers": ["console"], "level": level.upper()},
            "loggers": {
                # SQL echo is controlled by SQL_DEBUG on the engine instead.
                "sqlalchemy.engine": {"level": "WARNING"},
            },
        }
    )
