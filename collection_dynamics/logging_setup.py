"""Logging configuration for simulations and batch runs."""

from __future__ import annotations

import os
from logging.config import dictConfig

DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO")

_STDERR_ONLY = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "std": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"}
    },
    "handlers": {
        "stderr": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "std",
            "level": DEFAULT_LEVEL,
        }
    },
    "loggers": {
        # matplotlib is chatty at DEBUG
        "matplotlib": {"level": "WARNING"},
    },
    "root": {"level": DEFAULT_LEVEL, "handlers": ["stderr"]},
}


def setup_logging(level: str | None = None) -> None:
    """Route every logger to stderr at *level* (``LOG_LEVEL`` by default)."""
    config = dict(_STDERR_ONLY)
    if level is not None:
        config["handlers"] = {
            "stderr": {**_STDERR_ONLY["handlers"]["stderr"], "level": level}
        }
        config["root"] = {**_STDERR_ONLY["root"], "level": level}
    dictConfig(config)
