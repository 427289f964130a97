"""
SQLAlchemy Units of Work over the Flask-scoped session.

``SQLAlchemyUnitOfWork`` is used for registration and refresh-slot writes;
``SQLAlchemyReadOnlyUnitOfWork`` for credential checks and lookups.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from accounts.core.extensions import db
from accounts.repositories import UserRepository
from accounts.uow.base import UnitOfWork

# First SQL keyword of statements refused inside a read-only scope
WRITE_KEYWORDS = (
    "insert",
    "update",
    "delete",
    "merge",
    "replace",
    "upsert",
    "alter",
    "create",
    "drop",
    "truncate",
    "grant",
    "revoke",
)


class SQLAlchemyRepositoryContainer:
    """Repositories bound to one shared session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """Read-write scope: commit on a clean exit, rollback otherwise."""

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session autobegins on first use
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class _WriteGuard:
    """Session/connection listeners that raise on any write attempt."""

    def __init__(self, session: Session, conn: Connection) -> None:
        self.session = session
        self.conn = conn
        self.active = False

    def _on_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked (pending changes).")

    def _on_execute(self, conn, cursor, statement, parameters, context, executemany) -> None:
        keyword = statement.lstrip().split(None, 1)[0].lower() if statement else ""
        if keyword.startswith(WRITE_KEYWORDS):
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {keyword.upper()}")

    def install(self) -> None:
        if self.active:
            return
        event.listen(self.session, "before_flush", self._on_flush)
        event.listen(self.conn, "before_cursor_execute", self._on_execute)
        self.active = True

    def remove(self) -> None:
        if not self.active:
            return
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._on_flush)
        with suppress(InvalidRequestError):
            event.remove(self.conn, "before_cursor_execute", self._on_execute)
        self.active = False


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only scope over the Flask-scoped session.

    Writes are refused at two levels: an ORM ``before_flush`` hook and a
    statement filter on the connection. When the scope opens the transaction
    itself it always rolls back on exit, and on PostgreSQL/MySQL it also asks
    the server for ``SET TRANSACTION ... READ ONLY``.

    When the session already has a transaction open (nested use, tests) the
    scope joins it: the guards apply but the ``SET TRANSACTION`` directives
    and the final rollback are skipped.

    :param isolation_level: Isolation level for owned transactions, ``None``
        keeps the connection default.
    :param enforce_db_readonly: Emit ``SET TRANSACTION READ ONLY`` where
        supported.
    """

    _DIRECTIVE_DIALECTS = ("postgresql", "mysql", "mariadb")

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        # Resolve the scoped proxy to the request's Session: listeners and
        # transaction checks need the instance, not the registry
        super().__init__(session=db.session())
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._owned: SessionTransaction | None = None
        self._guard: _WriteGuard | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._owned = None
        if not self.session.in_transaction():
            self._owned = self.session.begin()

        conn = self.session.connection()
        self._guard = _WriteGuard(self.session, conn)
        self._guard.install()

        if self._owned is not None and conn.dialect.name in self._DIRECTIVE_DIALECTS:
            self._apply_directives()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
        finally:
            self._owned = None
            if self._guard is not None:
                self._guard.remove()
                self._guard = None

    def _apply_directives(self) -> None:
        try:
            if self.isolation_level:
                level = self.isolation_level.upper().strip()
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            current_app.logger.warning(
                "SET TRANSACTION directives failed (%s); relying on the write guard.", exc
            )

    def commit(self) -> None:
        """
        :raises RuntimeError: Always; nothing is ever written in this scope.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
