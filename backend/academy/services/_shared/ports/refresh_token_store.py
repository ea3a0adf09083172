"""Port for the refresh-token Session Store plus an in-memory adapter."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Read-model for a persisted refresh token.

    :ivar id: Store-assigned identifier.
    :ivar token_hash: Hex digest of the refresh secret (never the secret).
    :ivar user_id: Owning user id.
    :ivar expires_at: Absolute expiration (aware, UTC).
    :ivar revoked: Monotonic flag, ``False`` until consumed or revoked.
    :ivar created_at: Insert instant (aware, UTC).
    """

    id: int
    token_hash: str
    user_id: int
    expires_at: datetime
    revoked: bool
    created_at: datetime

    def is_usable(self, now: datetime) -> bool:
        """Return ``True`` when not revoked and ``expires_at`` is after ``now``."""
        return not self.revoked and self.expires_at > now


class RefreshTokenStore(Protocol):
    """
    Stateful store for refresh-token records.

    Records are looked up by digest only. After insert, the one permitted
    mutation is ``revoked: False -> True``; ``rotate`` MUST be atomic.
    """

    def create(self, *, token_hash: str, user_id: int, expires_at: datetime) -> RefreshTokenRecord:
        """Persist a brand-new, non-revoked record."""

    def find_by_hash(self, token_hash: str) -> RefreshTokenRecord | None:
        """Fetch the record whose digest equals ``token_hash``."""

    def mark_revoked(self, record_id: int) -> bool:
        """
        Flip ``revoked`` to ``True``.

        :returns: ``True`` only if this call performed the flip.
        """

    def rotate(
        self,
        *,
        old_id: int,
        new_hash: str,
        user_id: int,
        new_expires_at: datetime,
        now: datetime,
    ) -> RefreshTokenRecord | None:
        """
        Consume ``old_id`` and create its replacement as one unit.

        The old record is flipped only while still usable at ``now``. When the
        flip does not happen nothing is written and ``None`` is returned.
        """


def utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory store with atomic rotation behavior.

    .. note::
       A single lock serializes every operation, which gives ``rotate`` and
       ``mark_revoked`` their compare-and-swap semantics in unit tests.
    """

    def __init__(self) -> None:
        self._by_id: dict[int, RefreshTokenRecord] = {}
        self._by_hash: dict[str, int] = {}
        self._seq = 0
        self._lock = threading.Lock()

    def _insert(self, token_hash: str, user_id: int, expires_at: datetime) -> RefreshTokenRecord:
        if token_hash in self._by_hash:
            raise ValueError("Duplicate refresh token hash")
        self._seq += 1
        record = RefreshTokenRecord(
            id=self._seq,
            token_hash=token_hash,
            user_id=int(user_id),
            expires_at=utc(expires_at),
            revoked=False,
            created_at=datetime.now(UTC),
        )
        self._by_id[record.id] = record
        self._by_hash[token_hash] = record.id
        return record

    # -------------------------- API ----------------------------

    def create(self, *, token_hash: str, user_id: int, expires_at: datetime) -> RefreshTokenRecord:
        with self._lock:
            return self._insert(token_hash, user_id, expires_at)

    def find_by_hash(self, token_hash: str) -> RefreshTokenRecord | None:
        with self._lock:
            record_id = self._by_hash.get(token_hash)
            return self._by_id.get(record_id) if record_id is not None else None

    def mark_revoked(self, record_id: int) -> bool:
        with self._lock:
            record = self._by_id.get(record_id)
            if record is None or record.revoked:
                return False
            self._by_id[record_id] = replace(record, revoked=True)
            return True

    def rotate(
        self,
        *,
        old_id: int,
        new_hash: str,
        user_id: int,
        new_expires_at: datetime,
        now: datetime,
    ) -> RefreshTokenRecord | None:
        with self._lock:
            old = self._by_id.get(old_id)
            if old is None or not old.is_usable(utc(now)):
                return None
            if new_hash in self._by_hash:
                raise ValueError("Duplicate refresh token hash")
            self._by_id[old_id] = replace(old, revoked=True)
            return self._insert(new_hash, user_id, new_expires_at)

    def all(self) -> list[RefreshTokenRecord]:
        """Snapshot of every record, oldest first."""
        with self._lock:
            return [self._by_id[k] for k in sorted(self._by_id)]
