# academy/infra/jwt/jwt_token_provider.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from academy.services._shared.errors import InvalidTokenError
from academy.services._shared.ports import TokenProvider
from academy.services.auth.durations import ACCESS_TTL_DEFAULT, parse_duration

REQUIRED_CLAIMS = ("sub", "iat", "exp")


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Signing configuration handed to :class:`JWTTokenProvider`.

    :ivar secret_key: HMAC key. Never read from globals at signing time.
    :ivar algorithm: JWS algorithm (``HS256`` by default).
    :ivar issuer: Value of the ``iss`` claim; checked on verify when set.
    :ivar access_ttl: Default lifetime used when callers pass no TTL.
    :ivar leeway: Clock-skew tolerance applied on verify.
    """

    secret_key: str
    algorithm: str = "HS256"
    issuer: str | None = None
    access_ttl: timedelta = ACCESS_TTL_DEFAULT
    leeway: timedelta = timedelta(0)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> TokenSettings:
        """Build settings from a Flask-style config mapping."""
        secret = config.get("JWT_SECRET_KEY")
        if not secret:
            raise RuntimeError("JWT_SECRET_KEY must be configured")
        return cls(
            secret_key=str(secret),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER") or None,
            access_ttl=parse_duration(config.get("JWT_EXPIRES_IN"), ACCESS_TTL_DEFAULT),
        )


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    PyJWT adapter signing access credentials with a shared HMAC key.

    Verification failures of any kind (bad signature, expiry, wrong issuer,
    missing claims, malformed input, non-access type) raise the single
    :class:`InvalidTokenError`; the reason is not exposed.
    """

    settings: TokenSettings

    def issue(self, claims: dict[str, Any], ttl: timedelta | None = None) -> str:
        now = datetime.now(UTC)
        payload = dict(claims)
        payload["iat"] = now
        payload["exp"] = now + (ttl or self.settings.access_ttl)
        if self.settings.issuer:
            payload["iss"] = self.settings.issuer
        return jwt.encode(payload, self.settings.secret_key, algorithm=self.settings.algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        required = list(REQUIRED_CLAIMS)
        if self.settings.issuer:
            required.append("iss")
        try:
            claims = jwt.decode(
                token,
                self.settings.secret_key,
                algorithms=[self.settings.algorithm],
                issuer=self.settings.issuer,
                leeway=self.settings.leeway,
                options={"require": required},
            )
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise InvalidTokenError() from exc

        if claims.get("type", "access") != "access":
            raise InvalidTokenError()
        return claims
