"""Request identifiers: generation and propagation through the current context."""

from __future__ import annotations

import base64
import contextvars
import itertools
import os
import socket
import threading
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager

REQUEST_ID_KEY = "request-id"

_current_request_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default=""
)


def make_prefix(hostname: str | None = None) -> str:
    """Return "<host>/<10 random base62 characters>" identifying this process."""
    if hostname is None:
        try:
            hostname = socket.gethostname()
        except OSError:
            hostname = ""
    hostname = hostname or "localhost"
    suffix = ""
    while len(suffix) < 10:
        encoded = base64.b64encode(os.urandom(12)).decode("ascii")
        suffix = encoded.replace("+", "").replace("/", "")
    return f"{hostname}/{suffix[:10]}"


class RequestIdGenerator:
    """Produces identifiers of the form "<prefix>-000001", counting upwards."""

    def __init__(self, prefix: str | None = None) -> None:
        self.prefix = make_prefix() if prefix is None else prefix
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def next_id(self) -> str:
        """Return the next identifier."""
        with self._lock:
            number = next(self._counter)
        return f"{self.prefix}-{number:06d}"


@contextmanager
def request_scope(request_id: str) -> Iterator[str]:
    """Make ``request_id`` the current request identifier within the block."""
    token = _current_request_id.set(request_id)
    try:
        yield request_id
    finally:
        _current_request_id.reset(token)


def get_request_id() -> str:
    """Return the current request identifier, or "" if there is none."""
    return _current_request_id.get()


def get_context_request_id(metadata: Mapping[str, Sequence[str]] | None = None) -> str:
    """Prefer the first request id in incoming metadata, else the current one."""
    if metadata:
        values = metadata.get(REQUEST_ID_KEY)
        if values:
            return values[0]
    return get_request_id()