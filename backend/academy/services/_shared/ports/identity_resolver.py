"""Port through which authentication reads user identities."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Protocol

from werkzeug.security import check_password_hash, generate_password_hash


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return generate_password_hash("not-a-real-password")


def check_dummy_password(raw: str) -> bool:
    """Spend one password verification that can never succeed.

    Called when no user matches, so an unknown email costs the same hashing
    work as a wrong password.
    """
    check_password_hash(_dummy_password_hash(), raw if isinstance(raw, str) else "")
    return False


@dataclass(frozen=True, slots=True)
class IdentityView:
    """
    Immutable snapshot of a user as seen by authentication.

    :ivar id: Stable user id.
    :ivar email: Normalized email.
    :ivar role: Role tag (``PROFESSOR``, ``ADMIN`` or ``STUDENT``).
    :ivar name: Display name.
    :ivar password_hash: One-way verifier; excluded from ``repr``.
    """

    id: int
    email: str
    role: str
    name: str
    password_hash: str = field(default="", repr=False)

    @classmethod
    def from_model(cls, user: Any) -> IdentityView:
        """Build a view from an ORM ``User`` (or anything shaped like one)."""
        role = getattr(user.role, "value", user.role)
        return cls(
            id=int(user.id),
            email=user.email,
            role=str(role),
            name=user.name,
            password_hash=user.password_hash or "",
        )

    def check_password(self, raw: str) -> bool:
        if not self.password_hash or not isinstance(raw, str):
            return False
        return bool(check_password_hash(self.password_hash, raw))

    def public(self) -> dict[str, object]:
        """Client-safe projection."""
        return {"id": self.id, "email": self.email, "role": self.role, "name": self.name}


class IdentityResolver(Protocol):
    """Lookup of users by email or id, owned by user management."""

    def find_by_email(self, email: str) -> IdentityView | None: ...

    def find_by_id(self, user_id: int) -> IdentityView | None: ...


class InMemoryIdentityResolver(IdentityResolver):
    """Dictionary-backed resolver for unit tests."""

    def __init__(self) -> None:
        self._by_id: dict[int, IdentityView] = {}

    def add(
        self,
        *,
        email: str,
        password: str,
        role: str = "STUDENT",
        name: str = "Test User",
    ) -> IdentityView:
        view = IdentityView(
            id=len(self._by_id) + 1,
            email=email.strip().lower(),
            role=role,
            name=name,
            password_hash=generate_password_hash(password),
        )
        self._by_id[view.id] = view
        return view

    def remove(self, user_id: int) -> None:
        self._by_id.pop(user_id, None)

    def find_by_email(self, email: str) -> IdentityView | None:
        key = email.strip().lower()
        return next((v for v in self._by_id.values() if v.email == key), None)

    def find_by_id(self, user_id: int) -> IdentityView | None:
        return self._by_id.get(int(user_id))
