"""Tests for the RefreshToken model."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from academy.models.refresh_token import RefreshToken


def _token(user_id, token_hash="a" * 64):
    return RefreshToken(
        token_hash=token_hash,
        user_id=user_id,
        expires_at=datetime.now(UTC) + timedelta(days=7),
    )


class TestRefreshToken:
    def test_defaults(self, session, user):
        row = _token(user.id)
        session.add(row)
        session.commit()
        session.expire_all()

        fetched = session.get(RefreshToken, row.id)
        assert fetched.revoked is False
        assert fetched.created_at is not None

    def test_token_hash_unique(self, session, user):
        session.add(_token(user.id))
        session.commit()

        session.add(_token(user.id))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_token_hash_required(self, session, user):
        session.add(RefreshToken(user_id=user.id, expires_at=datetime.now(UTC)))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_has_no_plaintext_column(self):
        columns = set(RefreshToken.__table__.columns.keys())
        assert columns == {"id", "token_hash", "user_id", "expires_at", "revoked", "created_at"}
