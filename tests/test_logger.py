import json
import logging

from modernapi.logger import JsonFormatter, init, with_context
from modernapi.request import request_scope


def _record(level, message, **attrs):
    record = logging.LogRecord(
        "test", level, "/src/pkg/handlers.py", 42, message, None, None
    )
    for name, value in attrs.items():
        setattr(record, name, value)
    return record


def test_formatter_emits_expected_keys():
    entry = json.loads(JsonFormatter().format(_record(logging.INFO, "hello")))
    assert entry["msg"] == "hello"
    assert entry["level"] == "INFO"
    assert entry["caller"] == "pkg/handlers.py:42"
    assert entry["timestamp"].endswith("Z")
    assert list(entry)[:4] == ["level", "timestamp", "caller", "msg"]


def test_formatter_uses_capital_short_level_names():
    entry = json.loads(JsonFormatter().format(_record(logging.WARNING, "w")))
    assert entry["level"] == "WARN"


def test_formatter_adds_fields():
    record = _record(logging.DEBUG, "m", fields={"request-id": "abc"})
    entry = json.loads(JsonFormatter().format(record))
    assert entry["request-id"] == "abc"


def test_formatter_adds_stacktrace_for_exceptions():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        import sys

        record = _record(logging.ERROR, "failed", exc_info=sys.exc_info())
    entry = json.loads(JsonFormatter().format(record))
    assert "RuntimeError: boom" in entry["stacktrace"]


def test_init_is_idempotent():
    first = init()
    handlers = list(first.handlers)
    second = init()
    assert second is first
    assert second.handlers == handlers
    assert second.level == logging.DEBUG


def test_with_context_writes_request_id(capsys):
    with_context("req-1").info("hello %s", "world")
    entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert entry["msg"] == "hello world"
    assert entry["request-id"] == "req-1"


def test_with_context_uses_current_scope(capsys):
    with request_scope("scoped-id"):
        adapter = with_context()
    adapter.debug("x")
    entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert entry["request-id"] == "scoped-id"
    assert entry["level"] == "DEBUG"