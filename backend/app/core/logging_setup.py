# SPDX-License-Identifier: Apache-2.0
"""Central logging configuration: one stdout handler for the labelhub and uvicorn loggers."""
from __future__ import annotations

import logging
from logging.config import dictConfig


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s:%(name)s:%(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "labelhub": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging once; repeated calls are no-ops."""
    if logging.getLogger("labelhub").handlers:
        return
    dictConfig(_dict_config(level.upper()))
