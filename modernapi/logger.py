"""Structured JSON logging to standard output."""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path

from modernapi.request import REQUEST_ID_KEY, get_request_id

LOGGER_NAME = "modernapi"

_LEVEL_NAMES = {"WARNING": "WARN", "CRITICAL": "FATAL"}


class JsonFormatter(logging.Formatter):
    """Renders a record as one JSON object: level, timestamp, caller, msg, fields."""

    def format(self, record: logging.LogRecord) -> str:
        path = Path(record.pathname)
        caller = f"{path.parent.name}/{path.name}" if path.parent.name else path.name
        entry = {
            "level": _LEVEL_NAMES.get(record.levelname, record.levelname),
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "caller": f"{caller}:{record.lineno}",
            "msg": record.getMessage(),
            **(getattr(record, "fields", None) or {}),
        }
        if record.exc_info:
            entry["stacktrace"] = self.formatException(record.exc_info)
        elif record.stack_info:
            entry["stacktrace"] = record.stack_info
        return json.dumps(entry, default=str)


class _StdoutHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stdout`` is at the time of each record."""

    def emit(self, record: logging.LogRecord) -> None:
        self.stream = sys.stdout
        super().emit(record)


class _ContextAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra["fields"] = {**self.extra, **extra.pop("fields", {})}
        kwargs["extra"] = extra
        return msg, kwargs


_init_lock = threading.Lock()
_initialised = False


def init() -> logging.Logger:
    """Configure the package logger once and return it."""
    global _initialised
    logger = logging.getLogger(LOGGER_NAME)
    with _init_lock:
        if not _initialised:
            handler = _StdoutHandler()
            handler.setFormatter(JsonFormatter())
            logger.addHandler(handler)
            logger.setLevel(logging.DEBUG)
            logger.propagate = False
            _initialised = True
    return logger


def with_context(request_id: str | None = None) -> logging.LoggerAdapter:
    """Return a logger that adds the request id (or the current one) to every record."""
    if request_id is None:
        request_id = get_request_id()
    return _ContextAdapter(init(), {REQUEST_ID_KEY: request_id})