"""
Logging setup.

Records carry the request id (set by RequestIdMiddleware) and the acting
user id (set once the bearer token resolves). Production emits one JSON
object per line; development emits a single readable line.

Usage:
    from contentops.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Metrics uploaded", extra={"founder_id": str(fid), "month": month})
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
actor_id_var: ContextVar[Optional[str]] = ContextVar("actor_id", default=None)

CONTEXT_FIELDS = ("request_id", "actor_id")

# Attributes every LogRecord has; anything else came in through extra=
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", *CONTEXT_FIELDS}

NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")


def _context() -> Dict[str, str]:
    return {
        "request_id": request_id_var.get() or "-",
        "actor_id": actor_id_var.get() or "-",
    }


class ContextFilter(logging.Filter):
    """Stamp request_id and actor_id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _context().items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record; UUIDs, datetimes and other values are stringified."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, "-")
            if value != "-":
                payload[key] = value
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and value is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ConsoleFormatter(logging.Formatter):
    """Readable single line; extra= fields are appended as key=value."""

    def __init__(self):
        super().__init__(
            "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s actor=%(actor_id)s %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = " ".join(
            f"{key}={value}"
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and value is not None
        )
        return f"{line} {extras}" if extras else line


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Install a single stderr handler on the root logger.

    Safe to call more than once (reloads, tests): existing root handlers are
    replaced.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        environment: "production" selects JSON output
        debug: Forces DEBUG regardless of log_level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if environment == "production" else ConsoleFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; context fields are added by the root handler."""
    return logging.getLogger(name)
