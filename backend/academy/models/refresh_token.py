"""Persisted refresh-token record.

Only the SHA-256 digest of the refresh secret is stored; the plaintext is
handed to the client once and never written anywhere. ``revoked`` moves
from ``False`` to ``True`` and is never reset.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column

from academy.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin


class RefreshToken(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    __tablename__ = "refresh_tokens"
    __repr_fields__ = ("user_id", "expires_at", "revoked")

    # hex-encoded SHA-256 digest
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    __table_args__ = (Index("ix_refresh_tokens_user_id", "user_id"),)
