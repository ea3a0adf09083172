"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They serve as stable contracts between repositories,
stores, and application services.

The translation to HTTP responses (RFC 7807) is handled by
``academy/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer or BaseService later translates them to APIError.
    """

    default_message = "Service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


# --------------------------------------------------------------------------- #
# Authentication errors
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """Login failed. Never says whether the email or the password was wrong."""

    default_message = "Invalid credentials"


class UnauthorizedError(ServiceError):
    """Refresh token missing, unknown, revoked, expired or orphaned."""

    default_message = "Invalid refresh token"


class InvalidTokenError(ServiceError):
    """Access credential failed verification (signature, expiry or shape)."""

    default_message = "Invalid or expired token"


class InvariantViolationError(ServiceError):
    """A store returned data that breaks its own contract."""

    default_message = "Session store invariant violated"


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"


# --------------------------------------------------------------------------- #
# Error-normalizing boundary
# --------------------------------------------------------------------------- #


def collapse_errors(target: type[ServiceError], message: str | None = None) -> Callable[[F], F]:
    """
    Collapse every failure of the wrapped callable into ``target``.

    Instances of ``target`` pass through untouched. Any other exception is
    logged with its traceback on the wrapped function's module logger and
    replaced by ``target(message)``, so callers only ever observe one error
    type with one message.

    :param target: Public error type for the wrapped operation.
    :param message: Message for the replacement error; defaults to the
        target's ``default_message``.
    """

    def decorator(fn: F) -> F:
        log = logging.getLogger(fn.__module__)

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except target:
                raise
            except Exception as exc:
                log.error(
                    "%s failed: %s",
                    fn.__qualname__,
                    type(exc).__name__,
                    exc_info=True,
                    extra={"operation": fn.__name__},
                )
                raise target(message) from exc

        return wrapper  # type: ignore[return-value]

    return decorator
