"""Behavioural tests shared by every Session Store adapter.

The same cases run against the in-memory, SQLAlchemy and Redis stores so the
three backends stay interchangeable behind the port.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from sqlalchemy.exc import IntegrityError

from academy.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from academy.infra.sqlalchemy.refresh_token_store import SQLAlchemyRefreshTokenStore
from academy.services._shared.ports import InMemoryRefreshTokenStore
from academy.services.auth.secrets import generate_refresh_secret, hash_secret

DUPLICATE_ERRORS = (ValueError, IntegrityError)


def _digest() -> str:
    return hash_secret(generate_refresh_secret())


@pytest.fixture(params=["memory", "sqlalchemy", "redis"])
def store(request, session):
    if request.param == "memory":
        return InMemoryRefreshTokenStore()
    if request.param == "sqlalchemy":
        return SQLAlchemyRefreshTokenStore()
    return RedisRefreshTokenStore(r=fakeredis.FakeRedis())


@pytest.fixture()
def now():
    return datetime.now(UTC)


@pytest.fixture()
def record(store, user, now):
    return store.create(token_hash=_digest(), user_id=user.id, expires_at=now + timedelta(days=7))


class TestCreateAndFind:
    def test_create_returns_active_record(self, store, user, now):
        digest = _digest()
        expires = now + timedelta(days=7)
        rec = store.create(token_hash=digest, user_id=user.id, expires_at=expires)

        assert rec.id
        assert rec.token_hash == digest
        assert rec.user_id == user.id
        assert rec.revoked is False
        assert rec.expires_at == expires
        assert rec.expires_at.tzinfo is not None

    def test_find_by_hash(self, store, record):
        found = store.find_by_hash(record.token_hash)
        assert found is not None
        assert found.id == record.id
        assert found.user_id == record.user_id
        assert found.expires_at == record.expires_at
        assert found.revoked is False

    def test_find_unknown_returns_none(self, store, record):
        assert store.find_by_hash(_digest()) is None

    def test_ids_are_distinct(self, store, user, now):
        ids = {
            store.create(token_hash=_digest(), user_id=user.id, expires_at=now + timedelta(days=1)).id
            for _ in range(3)
        }
        assert len(ids) == 3

    def test_duplicate_digest_is_refused(self, store, record, user, now):
        with pytest.raises(DUPLICATE_ERRORS):
            store.create(token_hash=record.token_hash, user_id=user.id, expires_at=now + timedelta(days=1))


class TestMarkRevoked:
    def test_first_call_flips_second_reports_false(self, store, record):
        assert store.mark_revoked(record.id) is True
        assert store.mark_revoked(record.id) is False
        assert store.find_by_hash(record.token_hash).revoked is True

    def test_unknown_id(self, store, record):
        assert store.mark_revoked(record.id + 1000) is False

    def test_record_close_to_expiry_can_be_revoked(self, store, user, now):
        rec = store.create(token_hash=_digest(), user_id=user.id, expires_at=now + timedelta(seconds=30))
        assert store.mark_revoked(rec.id) is True


class TestRotate:
    def test_consumes_old_and_creates_new(self, store, record, user, now):
        new_hash = _digest()
        new = store.rotate(
            old_id=record.id,
            new_hash=new_hash,
            user_id=user.id,
            new_expires_at=now + timedelta(days=7),
            now=now,
        )
        assert new is not None
        assert new.id != record.id
        assert new.token_hash == new_hash
        assert new.user_id == user.id
        assert new.revoked is False
        assert store.find_by_hash(record.token_hash).revoked is True
        assert store.find_by_hash(new_hash).revoked is False

    def test_second_rotation_of_same_record_loses(self, store, record, user, now):
        kwargs = {"old_id": record.id, "user_id": user.id, "new_expires_at": now + timedelta(days=7), "now": now}
        assert store.rotate(new_hash=_digest(), **kwargs) is not None

        loser_hash = _digest()
        assert store.rotate(new_hash=loser_hash, **kwargs) is None
        assert store.find_by_hash(loser_hash) is None

    def test_revoked_record_is_not_rotated(self, store, record, user, now):
        store.mark_revoked(record.id)
        new_hash = _digest()
        result = store.rotate(
            old_id=record.id,
            new_hash=new_hash,
            user_id=user.id,
            new_expires_at=now + timedelta(days=7),
            now=now,
        )
        assert result is None
        assert store.find_by_hash(new_hash) is None

    def test_expired_record_is_not_rotated_or_revoked(self, store, record, user, now):
        later = now + timedelta(days=8)
        new_hash = _digest()
        result = store.rotate(
            old_id=record.id,
            new_hash=new_hash,
            user_id=user.id,
            new_expires_at=later + timedelta(days=7),
            now=later,
        )
        assert result is None
        assert store.find_by_hash(new_hash) is None
        assert store.find_by_hash(record.token_hash).revoked is False

    def test_unknown_record(self, store, record, user, now):
        result = store.rotate(
            old_id=record.id + 1000,
            new_hash=_digest(),
            user_id=user.id,
            new_expires_at=now + timedelta(days=7),
            now=now,
        )
        assert result is None

    def test_failed_insert_leaves_old_record_usable(self, store, record, user, now):
        other = store.create(token_hash=_digest(), user_id=user.id, expires_at=now + timedelta(days=7))
        with pytest.raises(DUPLICATE_ERRORS):
            store.rotate(
                old_id=record.id,
                new_hash=other.token_hash,
                user_id=user.id,
                new_expires_at=now + timedelta(days=7),
                now=now,
            )
        assert store.find_by_hash(record.token_hash).is_usable(now)
