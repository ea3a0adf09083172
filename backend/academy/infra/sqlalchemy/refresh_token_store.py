"""Relational Session Store backed by the ``refresh_tokens`` table."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from academy.models.refresh_token import RefreshToken
from academy.services._shared.ports import RefreshTokenRecord, RefreshTokenStore, utc
from academy.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork, UnitOfWork


def _to_record(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=row.id,
        token_hash=row.token_hash,
        user_id=row.user_id,
        expires_at=utc(row.expires_at),
        revoked=bool(row.revoked),
        created_at=utc(row.created_at),
    )


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Refresh-token store over SQLAlchemy.

    Every call runs in its own Unit of Work. ``rotate`` performs the
    conditional revoke and the insert inside one transaction, so a failure
    between them rolls both back.

    :param uow_factory: Builds the read-write Unit of Work.
    :param ro_uow_factory: Builds the read-only Unit of Work for lookups.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], UnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow_factory: Callable[[], UnitOfWork] | None = None,
    ) -> None:
        self._uow = uow_factory
        self._ro_uow = ro_uow_factory or (lambda: SQLAlchemyReadOnlyUnitOfWork(isolation_level=None))

    def create(self, *, token_hash: str, user_id: int, expires_at: datetime) -> RefreshTokenRecord:
        with self._uow() as uow:
            row = uow.refresh_tokens.add(
                RefreshToken(
                    token_hash=token_hash,
                    user_id=user_id,
                    expires_at=utc(expires_at),
                    revoked=False,
                    created_at=datetime.now(UTC),
                )
            )
            record = _to_record(row)
        return record

    def find_by_hash(self, token_hash: str) -> RefreshTokenRecord | None:
        with self._ro_uow() as uow:
            row = uow.refresh_tokens.get_by_hash(token_hash)
            return _to_record(row) if row is not None else None

    def mark_revoked(self, record_id: int) -> bool:
        with self._uow() as uow:
            changed = uow.refresh_tokens.mark_revoked(record_id)
        return changed

    def rotate(
        self,
        *,
        old_id: int,
        new_hash: str,
        user_id: int,
        new_expires_at: datetime,
        now: datetime,
    ) -> RefreshTokenRecord | None:
        with self._uow() as uow:
            if not uow.refresh_tokens.revoke_if_active(old_id, now=utc(now)):
                return None
            row = uow.refresh_tokens.add(
                RefreshToken(
                    token_hash=new_hash,
                    user_id=user_id,
                    expires_at=utc(new_expires_at),
                    revoked=False,
                    created_at=utc(now),
                )
            )
            record = _to_record(row)
        return record
