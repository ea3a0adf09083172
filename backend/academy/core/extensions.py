"""Extension singletons (database, migrations, Redis) and their wiring."""

from __future__ import annotations

import logging

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

log = logging.getLogger(__name__)

# Constraint names must be stable for Alembic batch migrations on SQLite
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)

db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
redis_client: redis.Redis | None = None


def init_redis(app: Flask) -> redis.Redis | None:
    """Connect to Redis when it backs the session store.

    :returns: The connected client, or ``None`` when ``REFRESH_STORE`` is not
        ``"redis"``.
    :raises RuntimeError: If the store is Redis but ``REDIS_URL`` is unset or
        the server does not answer ``PING``.
    """
    global redis_client
    app.extensions.pop("redis_client", None)
    redis_client = None

    if str(app.config.get("REFRESH_STORE", "")).lower() != "redis":
        return None

    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        raise RuntimeError("REFRESH_STORE=redis requires REDIS_URL")

    client = redis.Redis.from_url(redis_url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc

    redis_client = client
    app.extensions["redis_client"] = client
    log.info("Redis session store connected")
    return client


def init_app(app: Flask) -> None:
    """Bind SQLAlchemy and Flask-Migrate, then Redis if configured.

    Importing :mod:`academy.models` here registers every table on
    :data:`metadata` before Alembic inspects it.
    """
    db.init_app(app)

    from academy import models as _models  # noqa: F401

    migrate.init_app(app, db)
    init_redis(app)


def get_redis() -> redis.Redis:
    """Return the connected Redis client.

    :raises RuntimeError: If :func:`init_redis` did not connect one.
    """
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized; set REFRESH_STORE=redis and REDIS_URL.")
    return redis_client
