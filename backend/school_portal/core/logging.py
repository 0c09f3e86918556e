"""Structured JSON logging configuration."""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from school_portal.core.config import settings

LOG_FORMAT = "%(timestamp)s %(level)s %(logger)s %(module)s %(function)s"
QUIET_LOGGERS = {"uvicorn.access": logging.WARNING, "multipart": logging.WARNING}


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter emitting one object per record.

    The rendered message goes under ``event``; anything passed through
    ``extra=`` (entity, request_id, counts) lands at the top level.
    """

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["event"] = record.getMessage()
        log_record.setdefault("service", settings.PROJECT_NAME)
        log_record.setdefault("env", settings.ENV)

        log_record.pop("message", None)
        log_record.pop("asctime", None)


def setup_logging(level: str | None = None) -> None:
    """Route the root logger to stdout as JSON at ``level`` (default ``LOG_LEVEL``)."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    root_logger.addHandler(handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
