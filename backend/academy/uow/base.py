"""
Abstract Unit of Work contract shared by the persistence adapters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from academy.repositories import RefreshTokenRepository, UserRepository


class UnitOfWork(ABC):
    """
    Transactional boundary for one use-case step.

    Implementations expose ``users`` and ``refresh_tokens`` repositories bound
    to the same transaction, commit on a clean exit and roll back otherwise.
    """

    users: UserRepository
    refresh_tokens: RefreshTokenRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
