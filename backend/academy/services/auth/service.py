# academy/services/auth/service.py
from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from academy.services._shared.base import BaseService
from academy.services._shared.errors import (
    InvalidCredentialsError,
    InvariantViolationError,
    UnauthorizedError,
    collapse_errors,
)
from academy.services._shared.ports.identity_resolver import (
    IdentityResolver,
    IdentityView,
    check_dummy_password,
)
from academy.services._shared.ports.refresh_token_store import RefreshTokenStore
from academy.services._shared.ports.token_provider import TokenProvider
from academy.services.auth.dto import AuthTokenConfig, LoginIn, SessionOut
from academy.services.auth.secrets import generate_refresh_secret, hash_secret

log = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"


class AuthService(BaseService):
    """
    Session lifecycle service (login / rotate / revoke).

    Access credentials are stateless and signed by a pluggable
    :class:`TokenProvider`. Refresh secrets are random, handed out once, and
    persisted only as SHA-256 digests through a :class:`RefreshTokenStore`.

    Every public method sits behind :func:`collapse_errors`, so callers see
    exactly one failure type per operation whatever went wrong inside.

    Ordering
    --------
    The secret, its digest and the access credential are all produced before
    the store is written, so a signing failure never leaves a persisted or
    revoked record behind.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        refresh_store: RefreshTokenStore,
        identities: IdentityResolver,
        token_cfg: AuthTokenConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter signing/verifying access credentials.
        :param refresh_store: Stateful store for hashed refresh records.
        :param identities: Lookup of users by email or id.
        :param token_cfg: Lifetimes and secret length.
        :param clock: Source of "now" (aware UTC); defaults to the system clock.
        """
        self.tokens = token_provider
        self.refresh_store = refresh_store
        self.identities = identities
        self.cfg = token_cfg or AuthTokenConfig()
        self._clock = clock

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    @collapse_errors(InvalidCredentialsError)
    def login(self, dto: LoginIn) -> SessionOut:
        """
        Verify credentials and open a new session.

        :param dto: Login input.
        :returns: Access credential, refresh plaintext and its expiry.
        :raises InvalidCredentialsError: Unknown email, wrong password, or any
            internal failure.
        """
        user = self.identities.find_by_email(dto.email)
        if user is None:
            check_dummy_password(dto.password)
        if user is None or not user.check_password(dto.password):
            log.info("Login rejected", extra={"operation": "login"})
            raise InvalidCredentialsError()

        now = self.now_utc()
        access = self._mint_access(user)
        secret, digest = self._new_secret()
        expires_at = now + self.cfg.refresh_expires

        record = self.refresh_store.create(token_hash=digest, user_id=user.id, expires_at=expires_at)
        log.info(
            "Session opened",
            extra={"operation": "login", "user_id": user.id, "record_id": record.id},
        )
        return SessionOut(
            access_token=access,
            refresh_token=secret,
            expires_at=record.expires_at,
            user=user,
        )

    # ------------------------------------------------------------------ #
    # Rotation
    # ------------------------------------------------------------------ #

    @collapse_errors(UnauthorizedError)
    def rotate(self, presented: str | None) -> SessionOut:
        """
        Exchange a refresh plaintext for a new access/refresh pair.

        The presented secret is consumed: the store flips its record and
        inserts the replacement in one step, and only one of several
        concurrent callers presenting the same secret can win.

        :param presented: Refresh plaintext from the client.
        :returns: New session material for the same user.
        :raises UnauthorizedError: Missing, unknown, revoked, expired or
            orphaned token, a lost race, or any internal failure.
        """
        if not presented:
            raise UnauthorizedError()

        now = self.now_utc()
        record = self.refresh_store.find_by_hash(hash_secret(presented))
        if record is None or not record.is_usable(now):
            raise UnauthorizedError()

        user = self.identities.find_by_id(record.user_id)
        if user is None:
            raise UnauthorizedError()

        access = self._mint_access(user)
        secret, digest = self._new_secret()
        expires_at = now + self.cfg.refresh_expires

        replacement = self.refresh_store.rotate(
            old_id=record.id,
            new_hash=digest,
            user_id=user.id,
            new_expires_at=expires_at,
            now=now,
        )
        if replacement is None:
            # Another request consumed it between lookup and swap.
            raise UnauthorizedError()
        if replacement.token_hash != digest or replacement.user_id != user.id:
            raise InvariantViolationError(
                f"rotate returned record {replacement.id} not matching the request"
            )

        log.info(
            "Session rotated",
            extra={"operation": "rotate", "user_id": user.id, "record_id": replacement.id},
        )
        return SessionOut(
            access_token=access,
            refresh_token=secret,
            expires_at=replacement.expires_at,
            user=user,
        )

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    @collapse_errors(UnauthorizedError)
    def revoke(self, presented: str | None) -> bool:
        """
        Revoke the record behind ``presented``.

        :returns: ``True`` if this call revoked it; ``False`` when the token
            is missing, unknown, or already revoked.
        :raises UnauthorizedError: On internal store failures.
        """
        if not presented:
            return False
        record = self.refresh_store.find_by_hash(hash_secret(presented))
        if record is None:
            return False
        revoked = self.refresh_store.mark_revoked(record.id)
        if revoked:
            log.info(
                "Session revoked",
                extra={"operation": "revoke", "user_id": record.user_id, "record_id": record.id},
            )
        return revoked

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def access_claims(self, user: IdentityView) -> dict[str, Any]:
        """Claim set carried by access credentials."""
        return {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
            "type": ACCESS_TOKEN_TYPE,
            "jti": uuid.uuid4().hex,
        }

    def _mint_access(self, user: IdentityView) -> str:
        return self.tokens.issue(self.access_claims(user), self.cfg.access_expires)

    def _new_secret(self) -> tuple[str, str]:
        secret = generate_refresh_secret(self.cfg.refresh_bytes)
        return secret, hash_secret(secret)

    def now_utc(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return datetime.now(UTC)
