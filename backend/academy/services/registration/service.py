"""
UserRegistrationService
=======================

Creates a new login identity in a single transaction. Duplicate emails,
whether caught by the pre-check or by the unique constraint under a race,
surface as :class:`ConflictError`.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from academy.models.user import Role
from academy.repositories.user import UserRepository, normalize_email
from academy.services._shared.base import BaseService
from academy.services._shared.errors import ConflictError
from academy.services._shared.ports.identity_resolver import IdentityView
from academy.services.registration.dto import UserRegistrationIn, UserRegistrationOut

log = logging.getLogger(__name__)


class UserRegistrationService(BaseService):
    """Orchestrates account creation."""

    def register(self, dto: UserRegistrationIn) -> UserRegistrationOut:
        """
        Register a user.

        :param dto: Registration input.
        :type dto: :class:`UserRegistrationIn`
        :returns: The created identity.
        :rtype: :class:`UserRegistrationOut`
        :raises ConflictError: When the email is already in use.
        """
        norm_email = normalize_email(dto.email)
        try:
            with self.rw_uow() as uow:
                users: UserRepository = uow.users
                if users.exists_by_email(norm_email):
                    raise ConflictError("User", "email already in use")

                user = users.model(
                    email=norm_email,
                    name=dto.name,
                    role=Role(dto.role),
                )
                user.password = dto.password  # setter hashes
                users.add(user)
                view = IdentityView.from_model(user)
        except IntegrityError as exc:
            raise ConflictError("User", "email already in use") from exc

        log.info("User registered", extra={"operation": "register", "user_id": view.id})
        return UserRegistrationOut(user=view)
