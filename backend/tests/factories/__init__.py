"""Factory Boy base bound to the per-test SAVEPOINT session."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Holder for the session installed by the ``session`` fixture."""

    _session = None

    @classmethod
    def set(cls, session):
        cls._session = session

    @classmethod
    def get(cls):
        """Return the installed session.

        Raises
        ------
        RuntimeError
            If a factory runs outside a test that requested ``session``.
        """
        if cls._session is None:
            raise RuntimeError("Factories session not set. Did you pass the 'session' fixture?")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Persist with ``flush`` so rows get ids without ending the SAVEPOINT."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "flush"

    @classmethod
    def _after_postgeneration(cls, instance, create, results=None):
        # Post-generation hooks mutate the row after the first flush; a dirty
        # instance would trip the read-only unit of work's flush guard.
        if create:
            SQLAlchemySession.get().flush()
