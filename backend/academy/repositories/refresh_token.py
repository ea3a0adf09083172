"""Refresh-token repository.

Rows are keyed by the SHA-256 digest of the refresh secret. The only
mutation after insert is ``revoked: False -> True``, performed through a
conditional ``UPDATE`` so concurrent callers cannot both win.
"""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from academy.models.refresh_token import RefreshToken
from academy.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    model = RefreshToken

    def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        """Return the record whose stored digest equals ``token_hash``."""
        stmt = select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        result = self.session.execute(stmt).scalars().first()
        return cast(RefreshToken | None, result)

    def revoke_if_active(self, record_id: int, *, now: datetime) -> bool:
        """Flip ``revoked`` only while the record is still usable.

        Executes ``UPDATE ... WHERE id=:id AND revoked=false AND
        expires_at > :now`` and reports whether exactly one row changed.

        :param record_id: Primary key of the record.
        :param now: Reference instant used for the expiry guard.
        :returns: ``True`` when this call consumed the record.
        :rtype: bool
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.id == record_id,
                RefreshToken.revoked.is_(False),
                RefreshToken.expires_at > now,
            )
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def mark_revoked(self, record_id: int) -> bool:
        """Flip ``revoked`` regardless of expiry.

        :returns: ``True`` if the flag changed, ``False`` if the record was
            missing or already revoked.
        :rtype: bool
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == record_id, RefreshToken.revoked.is_(False))
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1
