"""
academy.services._shared.ports
==============================

Ports (hexagonal interfaces) the authentication service depends on.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider`, signing and verifying access credentials.

- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore` and :class:`~.RefreshTokenRecord`, hashed
    refresh-token persistence with atomic rotation.

- :mod:`identity_resolver`:
    :class:`~.IdentityResolver` and :class:`~.IdentityView`, user lookup.

Concrete adapters (database, Redis, PyJWT) live under ``academy.infra``.
"""

from __future__ import annotations

from .identity_resolver import IdentityResolver, IdentityView, InMemoryIdentityResolver
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
    utc,
)
from .token_provider import StubTokenProvider, TokenProvider

__all__ = [
    "IdentityResolver",
    "IdentityView",
    "InMemoryIdentityResolver",
    "InMemoryRefreshTokenStore",
    "RefreshTokenRecord",
    "RefreshTokenStore",
    "StubTokenProvider",
    "TokenProvider",
    "utc",
]
