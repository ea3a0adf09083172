# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import redis  # type: ignore[import-untyped]

from academy.services._shared.ports import RefreshTokenRecord, RefreshTokenStore, utc


def _s(value: bytes | str | None, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh-token store with atomic rotation.

    Layout
    ------
    ``rt:h:<digest>``
        Hash with ``id``, ``user_id``, ``expires_at``, ``revoked``,
        ``created_at``. Key TTL equals the remaining lifetime.
    ``rt:id:<id>``
        Digest of record ``id`` (same TTL), so records can be addressed by id.
    ``rt:seq``
        Counter assigning record ids.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token_hash: str) -> str:
        return f"rt:h:{token_hash}"

    @staticmethod
    def _kid(record_id: int) -> str:
        return f"rt:id:{record_id}"

    @staticmethod
    def _ttl(expires_at: datetime, now: datetime) -> int:
        return max(1, int((expires_at - now).total_seconds()) + 1)

    def _record(self, token_hash: str, h: dict) -> RefreshTokenRecord:
        return RefreshTokenRecord(
            id=int(_s(h.get(b"id"), "0")),
            token_hash=token_hash,
            user_id=int(_s(h.get(b"user_id"), "0")),
            expires_at=datetime.fromisoformat(_s(h.get(b"expires_at"))),
            revoked=_s(h.get(b"revoked"), "0") == "1",
            created_at=datetime.fromisoformat(_s(h.get(b"created_at"))),
        )

    def _stage_insert(
        self,
        p: redis.client.Pipeline,
        *,
        record_id: int,
        token_hash: str,
        user_id: int,
        expires_at: datetime,
        created_at: datetime,
    ) -> RefreshTokenRecord:
        ttl = self._ttl(expires_at, created_at)
        p.hset(
            self._k(token_hash),
            mapping={
                "id": str(record_id),
                "user_id": str(user_id),
                "expires_at": expires_at.isoformat(),
                "revoked": "0",
                "created_at": created_at.isoformat(),
            },
        )
        p.expire(self._k(token_hash), ttl)
        p.set(self._kid(record_id), token_hash, ex=ttl)
        return RefreshTokenRecord(
            id=record_id,
            token_hash=token_hash,
            user_id=int(user_id),
            expires_at=expires_at,
            revoked=False,
            created_at=created_at,
        )

    # -------------------- API ------------------------

    def create(self, *, token_hash: str, user_id: int, expires_at: datetime) -> RefreshTokenRecord:
        """Insert a record; refuses to overwrite an existing digest."""
        now = datetime.now(UTC)
        if self.r.exists(self._k(token_hash)):
            raise ValueError("Duplicate refresh token hash")
        record_id = int(self.r.incr("rt:seq"))
        with self.r.pipeline(transaction=True) as p:
            record = self._stage_insert(
                p,
                record_id=record_id,
                token_hash=token_hash,
                user_id=user_id,
                expires_at=utc(expires_at),
                created_at=now,
            )
            p.execute()
        return record

    def find_by_hash(self, token_hash: str) -> RefreshTokenRecord | None:
        h = self.r.hgetall(self._k(token_hash))
        if not h:
            return None
        return self._record(token_hash, h)

    def mark_revoked(self, record_id: int) -> bool:
        """Compare-and-swap ``revoked`` from ``0`` to ``1`` under WATCH."""
        token_hash = _s(self.r.get(self._kid(record_id)))
        if not token_hash:
            return False
        key = self._k(token_hash)

        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    current = p.hget(key, "revoked")
                    if current is None or _s(current) == "1":
                        p.unwatch()
                        return False
                    p.multi()
                    p.hset(key, "revoked", "1")
                    p.execute()
                return True
            except redis.WatchError:
                # Concurrent modification detected; re-read and decide again
                continue

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
        Consume ``old_id`` and create ``new_hash`` in one MULTI/EXEC.

        The old hash key is WATCHed while its state is checked; a concurrent
        writer aborts the EXEC and the loop re-reads, which then observes the
        record as revoked and returns ``None``.
        """
        now = utc(now)
        old_hash = _s(self.r.get(self._kid(old_id)))
        if not old_hash:
            return None
        k_old = self._k(old_hash)
        k_new = self._k(new_hash)
        new_id = int(self.r.incr("rt:seq"))

        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(k_old, k_new)
                    h = p.hgetall(k_old)
                    if not h:
                        p.unwatch()
                        return None
                    old = self._record(old_hash, h)
                    if not old.is_usable(now):
                        p.unwatch()
                        return None
                    if p.exists(k_new):
                        p.unwatch()
                        raise ValueError("Duplicate refresh token hash")

                    p.multi()
                    p.hset(k_old, "revoked", "1")
                    record = self._stage_insert(
                        p,
                        record_id=new_id,
                        token_hash=new_hash,
                        user_id=user_id,
                        expires_at=utc(new_expires_at),
                        created_at=now,
                    )
                    p.execute()
                return record
            except redis.WatchError:
                continue
