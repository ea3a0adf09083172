"""Shared API helpers: service wiring, bearer verification and response helpers."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Mapping
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from academy.core.errors import Unauthorized
from academy.infra.jwt.jwt_token_provider import JWTTokenProvider, TokenSettings
from academy.infra.sqlalchemy.identity_resolver import SQLAlchemyIdentityResolver
from academy.infra.sqlalchemy.refresh_token_store import SQLAlchemyRefreshTokenStore
from academy.services._shared.errors import InvalidTokenError
from academy.services._shared.ports import RefreshTokenStore
from academy.services.auth.dto import AuthTokenConfig
from academy.services.auth.durations import (
    ACCESS_TTL_DEFAULT,
    REFRESH_TTL_DEFAULT,
    parse_duration,
)
from academy.services.auth.secrets import DEFAULT_SECRET_BYTES
from academy.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])

AUTH_SERVICE_KEY = "auth_service"


# ------------------------------ Wiring ----------------------------------------


def build_refresh_store(config: Mapping[str, Any]) -> RefreshTokenStore:
    """Select the Session Store backend named by ``REFRESH_STORE``."""
    backend = str(config.get("REFRESH_STORE", "sqlalchemy")).lower()
    if backend == "redis":
        from academy.core.extensions import get_redis
        from academy.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore

        return RedisRefreshTokenStore(r=get_redis())
    if backend == "sqlalchemy":
        return SQLAlchemyRefreshTokenStore()
    raise RuntimeError(f"Unknown REFRESH_STORE backend: {backend!r}")


def refresh_bytes_from_config(config: Mapping[str, Any]) -> int:
    """Read ``REFRESH_TOKEN_BYTES``.

    :raises RuntimeError: If the value is not a positive integer.
    """
    raw = config.get("REFRESH_TOKEN_BYTES", DEFAULT_SECRET_BYTES)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise RuntimeError(f"REFRESH_TOKEN_BYTES must be an integer, got {raw!r}") from None
    if value <= 0:
        raise RuntimeError(f"REFRESH_TOKEN_BYTES must be positive, got {value}")
    return value


def build_auth_service(config: Mapping[str, Any]) -> AuthService:
    """Compose :class:`AuthService` from a Flask-style config mapping."""
    token_cfg = AuthTokenConfig(
        access_expires=parse_duration(config.get("JWT_EXPIRES_IN"), ACCESS_TTL_DEFAULT),
        refresh_expires=parse_duration(config.get("JWT_REFRESH_EXPIRES_IN"), REFRESH_TTL_DEFAULT),
        refresh_bytes=refresh_bytes_from_config(config),
    )
    return AuthService(
        token_provider=JWTTokenProvider(settings=TokenSettings.from_config(config)),
        refresh_store=build_refresh_store(config),
        identities=SQLAlchemyIdentityResolver(),
        token_cfg=token_cfg,
    )


def get_auth_service() -> AuthService:
    """Return the application's :class:`AuthService`, building it on first use."""
    service = current_app.extensions.get(AUTH_SERVICE_KEY)
    if service is None:
        service = build_auth_service(current_app.config)
        current_app.extensions[AUTH_SERVICE_KEY] = service
    return cast(AuthService, service)


# ------------------------------ Auth ------------------------------------------


def bearer_token() -> str | None:
    """Extract the credential from ``Authorization: Bearer <token>``."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access credential.

    Verified claims are exposed as ``flask.g.claims``. Every failure answers
    the same 401 so callers cannot tell a bad signature from an expired token.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = bearer_token()
        if token is None:
            raise Unauthorized("Invalid or expired token")
        try:
            g.claims = get_auth_service().tokens.verify(token)
        except InvalidTokenError:
            raise Unauthorized("Invalid or expired token") from None
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


# ------------------------------ Responses -------------------------------------


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
