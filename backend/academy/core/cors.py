"""CORS policy for the API.

The auth routes rely on a cookie, which browsers only attach to cross-origin
calls when the response allows credentials. Credentials are never paired
with a wildcard origin, so a blank or ``"*"`` ``CORS_ORIGINS`` leaves the
cookie flow usable from same-origin frontends only.
"""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from academy.core.logger import REQUEST_ID_HEADER


def parse_origins(raw: str | None) -> list[str]:
    """Split a comma-separated origin list, dropping blanks."""
    return [o.strip() for o in (raw or "").split(",") if o.strip()]


def init_app(app: Flask) -> None:
    """Register the CORS extension for ``/api/*``.

    :param app: Application whose ``CORS_ORIGINS`` and ``CORS_MAX_AGE``
        settings are consulted.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    explicit = bool(origins) and "*" not in origins

    CORS(
        app,
        resources={r"/api/*": {"origins": origins if explicit else "*"}},
        supports_credentials=explicit,
        allow_headers=["Content-Type", "Authorization", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        methods=["GET", "POST", "OPTIONS"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
