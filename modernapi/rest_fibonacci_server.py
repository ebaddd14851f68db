"""HTTP server that returns Fibonacci numbers at once or in portions."""

from __future__ import annotations

import argparse
import json
import logging
import re
import threading
import time
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlsplit

from modernapi.async_store import AsyncStore
from modernapi.fibonacci import fib, fibonacci_sequence

log = logging.getLogger(__name__)

REQUEST_ID_HEADER = "request-id"
DEFAULT_PORT = 6080

_ROUTE = re.compile(r"^/fibonacci/(?P<kind>sync|async)/(?P<number>[0-9]+)$")
_INT64_MAX = 2**63 - 1


@dataclass
class Response:
    """An HTTP response: status, headers and body."""

    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


def _json(payload: dict) -> Response:
    body = json.dumps(payload, separators=(",", ":")).encode()
    return Response(200, body, {"Content-Type": "application/json"})


def _error(message: str, status: int) -> Response:
    headers = {"Content-Type": "text/plain; charset=utf-8", "X-Content-Type-Options": "nosniff"}
    return Response(status, (message + "\n").encode(), headers)


class FibonacciApp:
    """Routes requests to the synchronous and asynchronous Fibonacci handlers."""

    def __init__(self, run_in_background: Callable[[Callable[[], None]], None] | None = None) -> None:
        self.async_stores: dict[str, AsyncStore] = {}
        self._lock = threading.Lock()
        self._run_in_background = run_in_background or (
            lambda work: threading.Thread(target=work, daemon=True).start()
        )

    def handle(self, method: str, path: str, headers: Mapping[str, str]) -> Response:
        """Answer one request and return the response."""
        match = _ROUTE.match(urlsplit(path).path)
        if match is None:
            return _error("404 page not found", 404)
        count = int(match["number"])
        if count > _INT64_MAX:
            return _error(f'strconv.Atoi: parsing "{match["number"]}": value out of range', 400)
        if match["kind"] == "sync":
            started = time.perf_counter()
            numbers = fibonacci_sequence(count)
            elapsed = time.perf_counter() - started
            return _json({"timeTaken": f"{elapsed:f} seconds", "fibonacciNumbers": numbers})
        lowered = {key.lower(): value for key, value in headers.items()}
        return self._async(count, lowered.get(REQUEST_ID_HEADER) or str(uuid.uuid4()))

    def _async(self, count: int, request_id: str) -> Response:
        if not request_id.strip():
            return _error("no request id in request", 400)
        with self._lock:
            store = self.async_stores.get(request_id)
            created = store is None
            if created:
                log.info("creating new store for reqId %s", request_id)
                store = self.async_stores[request_id] = AsyncStore(count)
        if created:
            self._run_in_background(lambda: self._compute(store, count, request_id))

        numbers, current, requested = store.read()
        log.info("read fibs reqId %s till current %d and numbers are: %s", request_id, current, numbers)
        end = current == requested
        if end:
            with self._lock:
                self.async_stores.pop(request_id, None)
        return _json({"requestid": request_id, "fibonacciNumbers": numbers, "endOfResponse": end})

    @staticmethod
    def _compute(store: AsyncStore, count: int, request_id: str) -> None:
        for index in range(count + 1):
            log.debug("for %s computing and writing fib of %d", request_id, index)
            store.write(fib(index), index)

    def serve(self, host: str = "", port: int = DEFAULT_PORT) -> None:
        """Serve HTTP on ``host:port`` until interrupted."""
        app = self

        class Handler(BaseHTTPRequestHandler):
            def do_GET(self) -> None:
                response = app.handle(self.command, self.path, dict(self.headers.items()))
                self.send_response(response.status)
                for name, value in response.headers.items():
                    self.send_header(name, value)
                self.send_header("Content-Length", str(len(response.body)))
                self.end_headers()
                self.wfile.write(response.body)

            do_POST = do_PUT = do_DELETE = do_PATCH = do_GET

            def log_message(self, format: str, *args) -> None:
                log.debug(format, *args)

        print(f"Server is running on {host}:{port}")
        with ThreadingHTTPServer((host, port), Handler) as server:
            server.serve_forever()


def main(argv: list[str] | None = None) -> int:
    """Start the Fibonacci HTTP server."""
    argparse.ArgumentParser(description="Fibonacci HTTP server").parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    try:
        FibonacciApp().serve("", DEFAULT_PORT)
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())