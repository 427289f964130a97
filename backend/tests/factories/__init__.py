"""Factory Boy base wired to the per-test transactional session."""

from __future__ import annotations

import factory
from sqlalchemy.orm import scoped_session

_bound: scoped_session | None = None


def bind_session(session: scoped_session | None) -> None:
    """Point every factory at ``session`` (``None`` unbinds)."""
    global _bound
    _bound = session


def current_session() -> scoped_session:
    """Session factories persist into.

    :raises RuntimeError: When a factory is used outside the ``session``
        fixture.
    """
    if _bound is None:
        raise RuntimeError("No session bound for factories; request the 'session' fixture.")
    return _bound


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Flush-only factory: rows stay inside the surrounding test transaction."""

    class Meta:
        abstract = True
        # Resolved lazily so each test gets its own session
        sqlalchemy_session_factory = current_session
        sqlalchemy_session_persistence = "flush"
