"""Logging for the Survey Service.

`build_logging_config` turns the configured level (`server.log_level`,
`LOG_LEVEL`) into a `dictConfig` mapping: one stdout handler shared by the
root logger, the `survey_app` package and the uvicorn loggers, with the
SQLAlchemy engine kept at WARNING so statements are not echoed.
`create_app` calls `configure_logging` with the loaded configuration.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
QUIET_LOGGERS = {"sqlalchemy.engine": "WARNING"}


def build_logging_config(level: str = "INFO") -> dict:
    level = level.upper()
    loggers: dict = {
        name: {"level": level, "handlers": ["console"], "propagate": False}
        for name in SERVER_LOGGERS
    }
    loggers["survey_app"] = {"level": level}
    loggers.update({name: {"level": quiet} for name, quiet in QUIET_LOGGERS.items()})
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": loggers,
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the logging configuration for `level`.

    When the root logger already has handlers (a reloader, pytest's capture)
    only the `survey_app` level is updated, so output is not duplicated.
    """
    if logging.getLogger().handlers:
        logging.getLogger("survey_app").setLevel(level.upper())
        return
    dictConfig(build_logging_config(level))


__all__ = ["build_logging_config", "configure_logging"]
