"""Command-line client for the Fibonacci HTTP server."""

from __future__ import annotations

import argparse
import json
import time
import urllib.error
import urllib.request
from collections.abc import Callable, Mapping

DEFAULT_BASE_URL = "http://localhost:6080"
POLL_INTERVAL = 5


class RequestError(Exception):
    """A request failed to complete or returned a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def send_request(url: str, headers: Mapping[str, str]) -> str:
    """Send a GET request and return the response body as text."""
    request = urllib.request.Request(url, headers=dict(headers), method="GET")
    try:
        with urllib.request.urlopen(request) as response:
            status = response.status
            body = response.read()
    except urllib.error.HTTPError as exc:
        exc.read()
        raise RequestError(f"request failed with status code: {exc.code}", exc.code) from exc
    except (urllib.error.URLError, OSError) as exc:
        raise RequestError(str(exc)) from exc
    if status < 200 or status >= 300:
        raise RequestError(f"request failed with status code: {status}", status)
    return body.decode("utf-8", errors="replace")


def _parse(body: str) -> dict:
    try:
        document = json.loads(body)
    except ValueError:
        return {}
    return document if isinstance(document, dict) else {}


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def run(
    type_of_call: str = "sync",
    number: int = 10,
    base_url: str = DEFAULT_BASE_URL,
    sleep: Callable[[float], None] = time.sleep,
) -> list[str]:
    """Make sync or async calls to the server, print and return the bodies."""
    headers = {"content-type": "application/json", "accept": "application/json"}
    results: list[str] = []

    if type_of_call == "sync":
        result = send_request(f"{base_url}/fibonacci/sync/{number}", headers)
        print(f"Synchronous Fibonacci sequence result for {number}: {result}")
        results.append(result)

    if type_of_call == "async":
        while True:
            result = send_request(f"{base_url}/fibonacci/async/{number}", headers)
            results.append(result)
            document = _parse(result)
            if "request-id" not in headers:
                headers["request-id"] = _as_text(document.get("requestid"))
            print(f"Asynchronous Fibonacci result for {number}: {result}")
            if document.get("endOfResponse") is True:
                break
            sleep(POLL_INTERVAL)

    return results


def main(argv: list[str] | None = None) -> int:
    """Parse the command line and run the client."""
    parser = argparse.ArgumentParser(description="Fibonacci HTTP client")
    parser.add_argument(
        "-typeOfCall",
        "--typeOfCall",
        dest="type_of_call",
        default="sync",
        help="do you want to make sync or async calls to server?",
    )
    parser.add_argument(
        "-number",
        "--number",
        dest="number",
        type=int,
        default=10,
        help="for what number do you want the fibonacci sequence",
    )
    args = parser.parse_args(argv)
    kind = "asynchronous" if args.type_of_call == "async" else "synchronous"
    try:
        run(args.type_of_call, args.number)
    except RequestError as exc:
        print(f"error sending {kind} request: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())