"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import AccessTokenSchema, LoginSchema, RegisterSchema, UserSchema

__all__ = [
    "AccessTokenSchema",
    "LoginSchema",
    "RegisterSchema",
    "UserSchema",
]
