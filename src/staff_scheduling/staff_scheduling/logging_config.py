"""Logging configuration for the scheduling services."""

from __future__ import annotations

import logging.config
import sys


def setup_logging(level: str = "INFO", *, debug: bool = False) -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "detailed": {
                    "format": "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(funcName)s(): %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": "DEBUG" if debug else level,
                    "formatter": "detailed" if debug else "standard",
                    "stream": sys.stdout,
                },
            },
            "loggers": {
                "": {"level": "DEBUG" if debug else level, "handlers": ["console"]},
                "mysql.connector": {"level": "WARNING", "propagate": True},
            },
        }
    )
