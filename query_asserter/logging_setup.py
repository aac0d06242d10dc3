"""Central logging configuration for the harness.

Applies a root stdout handler so all module loggers emit without per-module
setup. Keeps SQLAlchemy's engine logger quiet (statements are recorded by
SqlCapture instead) and avoids duplicate handlers when called repeatedly.
"""
from __future__ import annotations
import logging
from logging.config import dictConfig
from typing import Optional


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "sqlalchemy.engine": {"level": "WARNING"},
            "query_asserter": {"level": level},
        },
    }


def configure_logging(level: Optional[str] = None) -> None:
    """Configure harness-wide logging once.

    If the root logger already has handlers (pytest's capture, a host
    application), return to prevent duplicate output. When ``level`` is not
    given it is taken from the loaded configuration.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    if level is None:
        from query_asserter.config import load_config

        level = load_config().logging.level
    dictConfig(_dict_config(level.upper()))
