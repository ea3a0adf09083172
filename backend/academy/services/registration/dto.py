"""DTOs for :class:`UserRegistrationService`."""

from __future__ import annotations

from dataclasses import dataclass, field

from academy.services._shared.ports.identity_resolver import IdentityView


@dataclass(frozen=True, slots=True)
class UserRegistrationIn:
    """
    Input DTO for registration.

    :param email: Login email (normalized before lookup and insert).
    :type email: str
    :param password: Raw password; the model hashes it.
    :type password: str
    :param name: Display name.
    :type name: str
    :param role: ``PROFESSOR``, ``ADMIN`` or ``STUDENT``.
    :type role: str
    """

    email: str
    password: str = field(repr=False)
    name: str
    role: str = "STUDENT"


@dataclass(frozen=True, slots=True)
class UserRegistrationOut:
    user: IdentityView
