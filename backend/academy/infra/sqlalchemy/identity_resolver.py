"""Identity Resolver reading the ``users`` table."""

from __future__ import annotations

from collections.abc import Callable

from academy.services._shared.ports import IdentityResolver, IdentityView
from academy.uow import SQLAlchemyReadOnlyUnitOfWork, UnitOfWork


class SQLAlchemyIdentityResolver(IdentityResolver):
    """Look up users through a read-only Unit of Work and return immutable views."""

    def __init__(self, *, ro_uow_factory: Callable[[], UnitOfWork] | None = None) -> None:
        self._ro_uow = ro_uow_factory or (lambda: SQLAlchemyReadOnlyUnitOfWork(isolation_level=None))

    def find_by_email(self, email: str) -> IdentityView | None:
        with self._ro_uow() as uow:
            user = uow.users.get_by_email(email)
            return IdentityView.from_model(user) if user is not None else None

    def find_by_id(self, user_id: int) -> IdentityView | None:
        with self._ro_uow() as uow:
            user = uow.users.get(int(user_id))
            return IdentityView.from_model(user) if user is not None else None
