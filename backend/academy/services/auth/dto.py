from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from academy.services._shared.ports.identity_resolver import IdentityView
from academy.services.auth.durations import ACCESS_TTL_DEFAULT, REFRESH_TTL_DEFAULT
from academy.services.auth.secrets import DEFAULT_SECRET_BYTES

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email (normalized by the resolver).
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str = field(repr=False)


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SessionOut:
    """
    Result of a successful login or rotation.

    :param access_token: Signed access credential.
    :type access_token: str
    :param refresh_token: Refresh plaintext. This is the only place it ever appears.
    :type refresh_token: str
    :param expires_at: Expiry of the refresh record (aware, UTC).
    :type expires_at: datetime
    :param user: Identity the session belongs to.
    :type user: IdentityView
    """

    access_token: str
    refresh_token: str = field(repr=False)
    expires_at: datetime
    user: IdentityView


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access credential lifetime.
    :param refresh_expires: Refresh record lifetime.
    :param refresh_bytes: Random bytes per refresh secret.
    """

    access_expires: timedelta = ACCESS_TTL_DEFAULT
    refresh_expires: timedelta = REFRESH_TTL_DEFAULT
    refresh_bytes: int = DEFAULT_SECRET_BYTES
