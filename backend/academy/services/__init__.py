"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`academy.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``academy.services._shared.base``)
    * :class:`BaseService`

- Session lifecycle (from ``academy.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`LoginIn`, :class:`SessionOut`, :class:`AuthTokenConfig`

- Registration (from ``academy.services.registration``)
    * :class:`UserRegistrationService`
    * DTOs: :class:`UserRegistrationIn`, :class:`UserRegistrationOut`
"""

from __future__ import annotations

# Base primitive
from ._shared.base import BaseService

# Session lifecycle service + DTOs
from .auth import AuthService, AuthTokenConfig, LoginIn, SessionOut

# Registration service + DTOs
from .registration.dto import UserRegistrationIn, UserRegistrationOut
from .registration.service import UserRegistrationService

__all__ = [
    # Base
    "BaseService",
    # Auth
    "AuthService",
    "AuthTokenConfig",
    "LoginIn",
    "SessionOut",
    # Registration
    "UserRegistrationService",
    "UserRegistrationIn",
    "UserRegistrationOut",
]
