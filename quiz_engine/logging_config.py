"""Logging setup for the quiz engine.

Records carry the id of the HTTP request that produced them, plus any of
the engine's own context fields (`quiz_id`, `attempt_id`, `student_id`,
`store_key`) passed through `extra=`.
"""

import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Optional, Union

CONTEXT_FIELDS = ("quiz_id", "attempt_id", "student_id", "store_key")

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def bind_request_id(rid: Optional[str]) -> Token:
    return _request_id.set(rid)


def reset_request_id(token: Token) -> None:
    _request_id.reset(token)


class RequestIdFilter(logging.Filter):
    """Stamp every record with the current request id ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, engine context fields included when set."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", "-")
        if request_id != "-":
            entry["request_id"] = request_id
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: Union[int, str] = "INFO", fmt: str = "json") -> logging.Logger:
    """Send root logging to stdout as JSON, or as plain text when `fmt` is "plain"."""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(JSONFormatter() if fmt == "json" else logging.Formatter(PLAIN_FORMAT))
    logging.basicConfig(level=level, handlers=[handler], force=True)
    return logging.getLogger("quiz_engine")
