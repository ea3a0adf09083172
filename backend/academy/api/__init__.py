"""HTTP API: versioned blueprint registries mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def join_prefix(*segments: str) -> str:
    """Join URL segments into ``/a/b/c``, ignoring empty parts and stray slashes.

    >>> join_prefix("/api/", "v1", "")
    '/api/v1'
    """
    parts = [s.strip("/") for s in segments if s and s.strip("/")]
    return "/" + "/".join(parts)


def mount(app: Flask, prefix: str, registry: Iterable[tuple[Blueprint, str]]) -> None:
    """Register each ``(blueprint, relative_prefix)`` pair beneath ``prefix``."""
    for bp, rel_prefix in registry:
        app.register_blueprint(bp, url_prefix=join_prefix(prefix, rel_prefix))


def init_app(app: Flask) -> None:
    """Mount API v1 (health and auth routes)."""

    from academy.api.v1 import API_VERSION, REGISTRY

    mount(app, join_prefix(app.config.get("API_BASE_PREFIX", "/api"), API_VERSION), REGISTRY)


__all__ = ["init_app", "join_prefix", "mount"]
