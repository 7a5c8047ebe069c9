"""Tests for structured logging configuration."""

import json
import logging
import sys

from lodgify_gateway.core.logging import (
    ContextFilter,
    JSONFormatter,
    get_log_context,
    get_logger,
    get_logging_config,
)


def make_record(msg="Test message", **extra):
    record = logging.LogRecord(
        name="lodgify_gateway.test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test JSON formatter for structured logging."""

    def test_basic_json_format(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "lodgify_gateway.test"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["source"]["file"] == "test.py"
        assert data["source"]["line"] == 1

    def test_context_fields(self):
        record = make_record(
            "Retry 1/5",
            method="GET",
            path="/v2/properties",
            attempt=1,
            api_module="properties",
        )

        data = json.loads(JSONFormatter().format(record))

        assert data["method"] == "GET"
        assert data["path"] == "/v2/properties"
        assert data["attempt"] == 1
        assert data["api_module"] == "properties"

    def test_unknown_extras_grouped(self):
        data = json.loads(JSONFormatter().format(make_record(read_only=True)))

        assert data["extra"] == {"read_only": True}

    def test_exception_included(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert any("ValueError: bad" in line for line in data["exception"])


class TestContextFilter:
    def test_defaults_added(self):
        record = make_record()

        assert ContextFilter().filter(record) is True
        assert record.method is None
        assert record.status_code is None

    def test_existing_values_kept(self):
        record = make_record(method="POST")

        ContextFilter().filter(record)

        assert record.method == "POST"


class TestLoggingConfig:
    def test_handlers_write_to_stderr(self):
        config = get_logging_config()

        assert config["handlers"]["console"]["stream"] is sys.stderr
        assert "lodgify_gateway" in config["loggers"]

    def test_json_format(self, monkeypatch):
        from lodgify_gateway.core import logging as logging_module

        monkeypatch.setattr(logging_module.settings, "log_format", "json")

        config = get_logging_config()

        assert config["handlers"]["console"]["formatter"] == "json"

    def test_get_log_context_drops_none(self):
        assert get_log_context(method="GET", path=None, attempt=2) == {"method": "GET", "attempt": 2}

    def test_get_logger(self):
        assert get_logger().name == "lodgify_gateway"
        assert get_logger("lodgify_gateway.client").name == "lodgify_gateway.client"
