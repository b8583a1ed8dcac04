"""
Bridge Logging

One JSON object per line on stdout, which CloudWatch ingests as-is.
Each line carries the request's correlation id and, once the signature has
been verified, the id of the Up webhook event being processed.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from pythonjsonlogger import jsonlogger

ROOT_LOGGER_NAME = "upsync"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

correlation_id_var: ContextVar[Optional[str]] = ContextVar(
    "correlation_id", default=None
)
up_event_id_var: ContextVar[Optional[str]] = ContextVar("up_event_id", default=None)


class LogContextFilter(logging.Filter):
    """Stamp the invocation's correlation id and Up event id onto records"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get() or "N/A"
        up_event_id = up_event_id_var.get()
        if up_event_id:
            record.up_event_id = up_event_id
        return True


class BridgeJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with UTC ISO 8601 timestamps and short key names"""

    def __init__(self, service: Optional[str] = None, version: Optional[str] = None):
        static_fields = {}
        if service:
            static_fields["service"] = service
        if version:
            static_fields["version"] = version

        super().__init__(
            LOG_FORMAT,
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger",
            },
            static_fields=static_fields,
        )

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        return (
            datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
        )


def setup_logging(
    log_level: str = "INFO",
    service: Optional[str] = None,
    version: Optional[str] = None,
) -> logging.Logger:
    """
    Route the "upsync" logger tree to stdout as JSON.

    Safe to call more than once: warm Lambda containers re-import the app
    and the handler list is replaced rather than appended to.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(BridgeJsonFormatter(service=service, version=version))
    handler.addFilter(LogContextFilter())
    logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the "upsync" tree; module names are not prefixed twice."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """Use the caller's X-Correlation-ID, or mint one for this request."""
    correlation_id = correlation_id or str(uuid.uuid4())
    correlation_id_var.set(correlation_id)
    return correlation_id


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()


def set_up_event_id(event_id: Optional[str]) -> None:
    up_event_id_var.set(event_id)


def clear_log_context() -> None:
    correlation_id_var.set(None)
    up_event_id_var.set(None)
