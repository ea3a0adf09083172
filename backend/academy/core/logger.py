"""JSON logging with request correlation and credential redaction.

Every line written to stdout is one JSON object. Records emitted while a
request is active carry its ``request_id``; credential-bearing ``extra=``
attributes are masked before any handler formats them.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# promoted from ``extra=`` to top-level JSON fields
DEFAULT_EXTRA_KEYS = (
    "endpoint",
    "elapsed_ms",
    "method",
    "path",
    "status",
    "operation",
    "user_id",
    "record_id",
)

SENSITIVE_KEYS = frozenset(
    {"password", "refresh_token", "access_token", "token", "authorization", "cookie"}
)
REDACTED = "***"


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects.

    :param extra_keys: Record attributes copied into the payload when set.
    """

    def __init__(self, extra_keys: Iterable[str] = DEFAULT_EXTRA_KEYS) -> None:
        super().__init__()
        self.extra_keys = tuple(extra_keys)

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        for key in self.extra_keys:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RedactSecretsFilter(logging.Filter):
    """Mask credential-bearing ``extra=`` attributes.

    Only attribute values are touched; message templates are expected never
    to interpolate secrets in the first place.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key in SENSITIVE_KEYS:
            if getattr(record, key, None):
                setattr(record, key, REDACTED)
        return True


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on every record (``None`` outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """Return the current request identifier, generating one when necessary.

    An inbound ``X-Request-ID`` or ``X-Correlation-ID`` header wins; otherwise
    a UUID4 is minted and cached on :data:`flask.g` for the request.
    """
    if not has_request_context():
        return str(uuid4())
    cached = getattr(g, "request_id", None)
    if cached:
        return cached
    inbound = next((request.headers.get(h) for h in CORRELATION_HEADERS if request.headers.get(h)), None)
    g.request_id = inbound or str(uuid4())
    return g.request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Install the JSON stdout handler on the root logger.

    Replaces existing root handlers, so calling it twice does not duplicate
    output. Unknown level names fall back to ``INFO``.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())
    handler.addFilter(RedactSecretsFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)

    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        level = resolved if isinstance(resolved, int) else logging.INFO
    root.setLevel(level)


def init_app(app: Flask) -> None:
    """Correlate requests and emit one ``request.completed`` line per response."""

    app.logger.addFilter(RequestIdFilter())
    app.logger.addFilter(RedactSecretsFilter())
    access_log = logging.getLogger("academy.request")

    @app.before_request
    def _start_request() -> None:
        ensure_request_id()
        g.request_started = time.perf_counter()

    @app.after_request
    def _finish_request(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = getattr(g, "request_started", None)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2) if started else None
        access_log.info(
            "request.completed",
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "elapsed_ms": elapsed_ms,
            },
        )
        return response


__all__ = [
    "JSONFormatter",
    "RedactSecretsFilter",
    "RequestIdFilter",
    "configure_logging",
    "ensure_request_id",
    "init_app",
]
