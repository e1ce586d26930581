"""Structured JSON logging configuration."""

import contextvars
import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from sat_api.core.config import Settings, settings as default_settings

# Set by RequestIDMiddleware for the lifetime of a request
request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)


class RequestContextFilter(logging.Filter):
    """Tag records with the id of the request being served unless one was passed in ``extra``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()
        return True


class ServiceJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per line: timestamp, level, logger, event, then the ``extra`` fields."""

    def __init__(self, *args, service: str, env: str, **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service
        self.env = env

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["event"] = log_record.get("event") or record.getMessage()
        log_record["service"] = self.service
        log_record["env"] = self.env
        if log_record.get("request_id") is None:
            log_record.pop("request_id", None)

        log_record.pop("message", None)
        log_record.pop("asctime", None)


def setup_logging(settings: Settings | None = None) -> None:
    """Send JSON logs for the whole process to stdout."""
    settings = settings or default_settings

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(
        ServiceJsonFormatter(
            "%(timestamp)s %(level)s %(logger)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
            service=settings.PROJECT_NAME,
            env=settings.ENV,
        )
    )
    root_logger.addHandler(handler)

    # boto3 logs every retry and connection at INFO
    for noisy in ("uvicorn.access", "botocore", "boto3", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
