"""Unit tests for JSON formatter."""

import json
import logging
import sys

import pytest

from rawhttpd.bootstrap.logging_setup import JsonFormatter


def _record(msg="Test message", exc_info=None):
    record = logging.LogRecord(
        name="rawhttpd.test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.correlation_id = "test-correlation-id"
    record.component = "test"
    return record


@pytest.fixture(name="json_formatter")
def json_formatter_fixture():
    return JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S")


def test_json_formatter_basic_fields(json_formatter):
    log_data = json.loads(json_formatter.format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["correlation_id"] == "test-correlation-id"
    assert log_data["component"] == "test"
    assert log_data["message"] == "Test message"
    assert "timestamp" in log_data


def test_json_formatter_includes_event_and_known_extras(json_formatter):
    record = _record()
    record.event = "request_complete"
    record.client = "127.0.0.1:5000"
    record.status = "HTTP/1.1 200 OK"
    record.unrelated = "dropped"

    log_data = json.loads(json_formatter.format(record))

    assert log_data["event"] == "request_complete"
    assert log_data["client"] == "127.0.0.1:5000"
    assert log_data["status"] == "HTTP/1.1 200 OK"
    assert "unrelated" not in log_data


def test_json_formatter_redacts_sensitive_extras(json_formatter):
    record = _record()
    record.route = "/echo/token=abc"

    log_data = json.loads(json_formatter.format(record))

    assert log_data["route"] == "[REDACTED]"


def test_json_formatter_keys_are_sorted(json_formatter):
    output = json_formatter.format(_record())

    keys = list(json.loads(output).keys())
    assert keys == sorted(keys)


def test_json_formatter_includes_exception(json_formatter):
    try:
        raise ValueError("broken")
    except ValueError:
        record = _record(exc_info=sys.exc_info())

    log_data = json.loads(json_formatter.format(record))

    assert "ValueError: broken" in log_data["exception"]
