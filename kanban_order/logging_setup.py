"""Central logging configuration for the application.

Applies a root stdout handler so all module loggers emit INFO-level logs
without requiring per-module setup. Keeps uvicorn loggers visible and avoids
duplicate handlers on reloads. ``LOG_LEVEL`` raises or lowers the level of
the ``kanban_order`` loggers (DEBUG shows every shift statement).
"""
from __future__ import annotations
import logging
import os
from logging.config import dictConfig

_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": _FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": "INFO", "handlers": ["console"]},
        "loggers": {
            "kanban_order": {"level": level, "propagate": True},
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging() -> None:
    """Configure application-wide logging once.

    If the root logger already has handlers, return to prevent duplicate output
    (important under reloaders/watchers and pytest's capture handlers).
    """
    root = logging.getLogger()
    if root.handlers:
        return
    level = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    dictConfig(_dict_config(level))
