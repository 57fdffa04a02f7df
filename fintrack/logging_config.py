"""
Structured logging for the FinTrack service.

Every module gets its logger through get_logger() so all output
lives under the "fintrack" namespace. configure_logging() is called
once at application startup.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

_LOGGER_PREFIX = "fintrack"

# Attributes present on every LogRecord; anything else came from extra=
_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}

# Never written to the log, whatever the caller passes in extra=
SENSITIVE_KEYS = {"password", "password_hash", "token", "authorization", "secret"}


class JSONFormatter(logging.Formatter):
    """Format each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in vars(record).items():
            if key in _STDLIB_KEYS or key in payload:
                continue
            if key.lower() in SENSITIVE_KEYS:
                continue
            payload[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    return str(obj)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the fintrack namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(level: str = "INFO", json_output: bool = True) -> logging.Logger:
    """
    Install a single stdout handler on the fintrack root logger.

    Safe to call more than once: an existing handler is replaced
    rather than duplicated.
    """
    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s"
        ))
    root.addHandler(handler)
    root.propagate = False
    return root
