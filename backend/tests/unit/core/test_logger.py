"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging

from academy.core.logger import JSONFormatter, REDACTED, RedactSecretsFilter, ensure_request_id


def _record(**extra):
    record = logging.LogRecord("academy.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRedactSecretsFilter:
    def test_masks_sensitive_extras(self):
        record = _record(refresh_token="abc123", password="pw", user_id=7)
        assert RedactSecretsFilter().filter(record) is True
        assert record.refresh_token == REDACTED
        assert record.password == REDACTED
        assert record.user_id == 7

    def test_leaves_records_without_secrets_alone(self):
        record = _record(operation="login")
        RedactSecretsFilter().filter(record)
        assert record.operation == "login"
        assert not hasattr(record, "refresh_token")


class TestJSONFormatter:
    def test_promotes_known_extras(self):
        record = _record(operation="rotate", user_id=3, record_id=9)
        payload = json.loads(JSONFormatter().format(record))
        assert payload["message"] == "hello world"
        assert payload["level"] == "INFO"
        assert payload["operation"] == "rotate"
        assert payload["user_id"] == 3
        assert payload["record_id"] == 9


class TestRequestId:
    def test_reuses_inbound_header(self, app):
        with app.app_context(), app.test_request_context("/", headers={"X-Request-ID": "req-123"}):
            assert ensure_request_id() == "req-123"
            assert ensure_request_id() == "req-123"

    def test_generates_when_absent(self, app):
        with app.app_context(), app.test_request_context("/"):
            first = ensure_request_id()
            assert first
            assert ensure_request_id() == first
