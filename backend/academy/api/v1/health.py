"""Liveness/readiness probe covering the database and the session store."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from academy.api.deps import json_response, timing
from academy.core.extensions import db, get_redis

bp = Blueprint("health", __name__)


def _probe_db() -> str:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        return "fail"
    return "ok"


def _probe_store(backend: str, db_status: str) -> str:
    # The relational store lives in the main database.
    if backend != "redis":
        return db_status
    try:
        get_redis().ping()
    except (RedisError, RuntimeError):
        current_app.logger.exception("healthcheck.store_error")
        return "fail"
    return "ok"


@bp.get("/health")
@timing
def healthcheck():
    """Report component status; ``status`` is ``degraded`` if any probe failed."""

    backend = str(current_app.config.get("REFRESH_STORE", "sqlalchemy")).lower()
    db_status = _probe_db()
    store_status = _probe_store(backend, db_status)
    healthy = db_status == store_status == "ok"
    payload = {
        "status": "ok" if healthy else "degraded",
        "db": db_status,
        "store": {"backend": backend, "status": store_status},
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if healthy else 503)
