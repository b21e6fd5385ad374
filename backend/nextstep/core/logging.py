"""Logging setup: one console handler, request context on every record."""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict

from nextstep.core.context import log_context

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | req=%(request_id)s user=%(user_id)s | %(message)s"

# Third-party loggers that are chatty at INFO.
QUIET_LOGGERS = ("httpx", "opik", "urllib3")


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        for name, value in log_context().items():
            setattr(record, name, value)
        return True


def build_logging_config(log_level: str, *, debug: bool = False) -> Dict[str, Any]:
    loggers: Dict[str, Any] = {name: {"level": "WARNING"} for name in QUIET_LOGGERS}
    # SQL echo only in debug mode.
    loggers["sqlalchemy.engine"] = {"level": "INFO" if debug else "WARNING"}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "filters": {"request_context": {"()": "nextstep.core.logging.RequestContextFilter"}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": log_level,
                "filters": ["request_context"],
            }
        },
        "loggers": loggers,
        "root": {"handlers": ["console"], "level": log_level},
    }


def configure_logging(*, log_level: str = "INFO", debug: bool = False) -> None:
    """Install the logging config; later calls are ignored."""
    if getattr(configure_logging, "_configured", False):
        return

    dictConfig(build_logging_config(log_level, debug=debug))
    logging.getLogger(__name__).debug("Logging configured at %s (debug=%s)", log_level, debug)
    setattr(configure_logging, "_configured", True)
