import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from storefront.app.api.deps import get_db, get_session_factory
from storefront.app.db.models.models_v1 import Base


def _sqlite_begin_immediate(eng):
    # verrou d'écriture pris dès BEGIN : les transactions concurrentes
    # attendent (busy timeout) au lieu d'échouer en "database is locked"
    @event.listens_for(eng, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(eng, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    Base isolée par test.

    TEST_DATABASE_URL (ex: Postgres jetable) sinon fichier SQLite dans tmp_path.
    Les jobs testés commitent par ligne : pas de pattern SAVEPOINT ici,
    le schéma est recréé à chaque test.
    """
    url = os.getenv("TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'storefront.db'}"
    connect_args = {"timeout": 30, "check_same_thread": False} if url.startswith("sqlite") else {}
    eng = create_engine(url, connect_args=connect_args)
    if url.startswith("sqlite"):
        _sqlite_begin_immediate(eng)

    Base.metadata.drop_all(bind=eng)
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    from storefront.app.main import app

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()

