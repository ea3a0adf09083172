"""Idempotent database seed helpers for local development environments."""

from __future__ import annotations

import logging

from flask_sqlalchemy import SQLAlchemy

from academy.models.user import Role, User
from academy.repositories.user import UserRepository

LOGGER = logging.getLogger(__name__)

USER_FIXTURES: list[dict[str, str]] = [
    {
        "email": "admin@academy.test",
        "name": "Ada Admin",
        "role": "ADMIN",
        "password": "adminPass123",
    },
    {
        "email": "prof.turing@academy.test",
        "name": "Alan Turing",
        "role": "PROFESSOR",
        "password": "profPass123",
    },
    {
        "email": "prof.hopper@academy.test",
        "name": "Grace Hopper",
        "role": "PROFESSOR",
        "password": "profPass456",
    },
    {
        "email": "student.lovelace@academy.test",
        "name": "Ada Lovelace",
        "role": "STUDENT",
        "password": "studentPass1",
    },
    {
        "email": "student.knuth@academy.test",
        "name": "Donald Knuth",
        "role": "STUDENT",
        "password": "studentPass2",
    },
]


def seed_users(db: SQLAlchemy, *, verbose: bool = False) -> dict[str, int]:
    """Create the demo accounts that do not exist yet.

    Existing rows (matched by normalized email) are left untouched, so the
    command can be re-run safely.

    :returns: ``{"created": n, "existing": m}``.
    """
    repo = UserRepository(session=db.session)
    counters = {"created": 0, "existing": 0}
    for fixture in USER_FIXTURES:
        if repo.exists_by_email(fixture["email"]):
            counters["existing"] += 1
            if verbose:
                LOGGER.debug("seed.user.exists", extra={"operation": fixture["email"]})
            continue
        user = User(email=fixture["email"], name=fixture["name"], role=Role(fixture["role"]))
        user.password = fixture["password"]
        repo.add(user)
        counters["created"] += 1
        LOGGER.info("seed.user.created", extra={"user_id": user.id})
    db.session.commit()
    return counters


def run_all(db: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Run every seeder and return a per-table summary."""
    return {"users": seed_users(db, verbose=verbose)}
