"""Shared pytest fixtures.

The app is built once per run against in-memory SQLite. Every test gets a
session joined to an outer transaction through SAVEPOINTs, so the Units of
Work can ``commit()`` freely and the outer rollback still discards it all.
"""

from __future__ import annotations

import os
from typing import Any

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from accounts.api import deps
from accounts.core.config import TestingConfig
from accounts.core.extensions import db as _db
from accounts.factory import create_app
from accounts.services._shared.ports import StubImageUploader
from tests.factories import bind_session


class TestConfig(TestingConfig):
    """Testing configuration.

    Cookies are not ``Secure`` so the test client sends them back over
    plain HTTP.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    AUTH_COOKIE_SECURE = False
    LOG_LEVEL = "WARNING"


# ---------------------------------------------------------------------------
# Application & database
# ---------------------------------------------------------------------------


def _enable_sqlite_savepoints(engine) -> None:
    """Let pysqlite honour SAVEPOINTs.

    The driver issues its own BEGIN lazily and commits around DDL, so rows a
    Unit of Work commits would escape the outer rollback. Disabling that and
    emitting BEGIN ourselves keeps every test inside one real transaction.
    """

    @event.listens_for(engine, "connect")
    def _no_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Flask app with staged uploads redirected to a temp directory."""
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestConfig, instance_relative_config=False)
    application.config["UPLOAD_TEMP_DIR"] = str(tmp_path_factory.mktemp("uploads"))
    return application


@pytest.fixture(scope="session")
def db(app):
    """Schema created once; dropped at the end of the run."""
    with app.app_context():
        _enable_sqlite_savepoints(_db.engine)
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Single connection shared by every test (in-memory SQLite lives on it)."""
    conn = db.engine.connect()
    yield conn
    conn.close()


@pytest.fixture()
def session(db, connection):
    """Scoped session swapped into ``db.session`` for the duration of a test.

    Notes
    -----
    ``join_transaction_mode="create_savepoint"`` turns every session-level
    commit/rollback into a SAVEPOINT release/rollback. Requests served by the
    test client close this session on teardown: commit factory rows first
    when a test goes through HTTP.
    """
    outer = connection.begin()
    scoped = scoped_session(
        sessionmaker(
            bind=connection,
            join_transaction_mode="create_savepoint",
            autoflush=False,
        )
    )

    app_session = db.session
    app_session.remove()
    db.session = scoped
    bind_session(scoped)
    try:
        yield scoped
    finally:
        bind_session(None)
        scoped.remove()
        db.session = app_session
        outer.rollback()


@pytest.fixture(autouse=True)
def _isolated(session):
    """Run every test inside the transactional session."""
    yield


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def faker():
    """Seeded :class:`faker.Faker`."""
    from faker import Faker

    Faker.seed(1337)
    return Faker()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def uploader(app):
    """Fresh stub uploader installed on the app for one test."""
    stub = StubImageUploader()
    previous = app.extensions[deps.UPLOADER_KEY]
    app.extensions[deps.UPLOADER_KEY] = stub
    yield stub
    app.extensions[deps.UPLOADER_KEY] = previous


@pytest.fixture()
def freeze_time() -> Any:
    """:func:`freezegun.freeze_time`, imported lazily."""
    from freezegun import freeze_time as _freeze_time

    return _freeze_time
