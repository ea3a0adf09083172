from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from academy.services._shared.errors import InvalidTokenError


class TokenProvider(Protocol):
    """Port for signing and verifying stateless access credentials."""

    def issue(self, claims: dict[str, Any], ttl: timedelta) -> str:
        """Sign ``claims`` with ``iat``/``exp`` added from ``ttl``."""

    def verify(self, token: str) -> dict[str, Any]:
        """
        Return the verified claim set.

        :raises InvalidTokenError: On any signature, expiry or format problem.
        """


class StubTokenProvider(TokenProvider):
    """Deterministic, unsigned token provider used in unit tests."""

    def __init__(self, *, now: datetime | None = None) -> None:
        self._now = now
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    def _clock(self) -> datetime:
        return self._now or datetime.now(tz=UTC)

    def issue(self, claims: dict[str, Any], ttl: timedelta) -> str:
        self._seq += 1
        issued_at = self._clock()
        token = f"access.{claims.get('sub')}.{self._seq}"
        payload = dict(claims)
        payload["iat"] = int(issued_at.timestamp())
        payload["exp"] = int((issued_at + ttl).timestamp())
        self._issued[token] = payload
        return token

    def verify(self, token: str) -> dict[str, Any]:
        payload = self._issued.get(token)
        if payload is None or payload["exp"] <= int(self._clock().timestamp()):
            raise InvalidTokenError()
        return dict(payload)
