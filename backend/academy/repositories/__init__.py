"""Repository package exposing persistence-layer access for the domain models."""

from __future__ import annotations

from academy.repositories.base import BaseRepository
from academy.repositories.refresh_token import RefreshTokenRepository
from academy.repositories.user import UserRepository, normalize_email

__all__ = [
    "BaseRepository",
    "RefreshTokenRepository",
    "UserRepository",
    "normalize_email",
]
