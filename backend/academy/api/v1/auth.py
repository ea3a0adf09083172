"""Authentication endpoints: register, login, refresh-token, logout, me.

The refresh secret travels only in an HTTP-only cookie scoped to the auth
path; response bodies never contain it.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from flask import Blueprint, Response, current_app, g, request

from academy.api.deps import get_auth_service, json_response, require_auth, timing
from academy.core.errors import Unauthorized
from academy.schemas import AccessTokenSchema, LoginSchema, RegisterSchema, UserSchema
from academy.services._shared.errors import ServiceError, UnauthorizedError
from academy.services.auth.dto import LoginIn, SessionOut
from academy.services.registration.dto import UserRegistrationIn
from academy.services.registration.service import UserRegistrationService

log = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
user_schema = UserSchema()
token_schema = AccessTokenSchema()


# ------------------------------ Cookie helpers --------------------------------


def _cookie_name() -> str:
    return str(current_app.config.get("REFRESH_COOKIE_NAME", "refreshToken"))


def _cookie_options() -> dict:
    cfg = current_app.config
    return {
        "path": cfg.get("REFRESH_COOKIE_PATH", "/api/v1/auth"),
        "secure": bool(cfg.get("REFRESH_COOKIE_SECURE", False)),
        "samesite": cfg.get("REFRESH_COOKIE_SAMESITE", "Lax"),
        "httponly": True,
    }


def _set_refresh_cookie(response: Response, session: SessionOut) -> None:
    max_age = max(0, int((session.expires_at - datetime.now(UTC)).total_seconds()))
    response.set_cookie(
        _cookie_name(),
        session.refresh_token,
        max_age=max_age,
        expires=session.expires_at,
        **_cookie_options(),
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(_cookie_name(), **_cookie_options())


# ------------------------------ Endpoints -------------------------------------


@bp.post("/register")
@timing
def register():
    """Create an account and return its public representation."""

    data = register_schema.load(request.get_json(silent=True) or {})
    service = UserRegistrationService()
    try:
        result = service.register(UserRegistrationIn(**data))
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc
    return json_response({"status": "ok", "user": user_schema.dump(result.user)}, status=201)


@bp.post("/login")
@timing
def login():
    """Verify credentials, return an access credential and set the refresh cookie."""

    data = login_schema.load(request.get_json(silent=True) or {})
    service = get_auth_service()
    try:
        session = service.login(LoginIn(email=data["email"], password=data["password"]))
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc

    response = json_response(
        token_schema.dump({"access_token": session.access_token, "user": session.user})
    )
    _set_refresh_cookie(response, session)
    return response


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Exchange the refresh cookie for a new access credential and cookie."""

    service = get_auth_service()
    try:
        session = service.rotate(request.cookies.get(_cookie_name()))
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc

    response = json_response(token_schema.dump({"access_token": session.access_token}))
    _set_refresh_cookie(response, session)
    return response


@bp.post("/logout")
@timing
def logout():
    """Revoke the refresh cookie's session and clear the cookie.

    Always answers ``{"status": "ok"}``; an unknown or already revoked token
    is not an error for the client.
    """

    service = get_auth_service()
    try:
        service.revoke(request.cookies.get(_cookie_name()))
    except UnauthorizedError:
        log.warning("Logout could not revoke the presented session", extra={"operation": "logout"})

    response = json_response({"status": "ok"})
    _clear_refresh_cookie(response)
    return response


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the identity behind the presented access credential."""

    claims = g.claims
    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise Unauthorized("Invalid or expired token") from None

    user = get_auth_service().identities.find_by_id(user_id)
    if user is None:
        raise Unauthorized("Invalid or expired token")
    return json_response(user_schema.dump(user))
