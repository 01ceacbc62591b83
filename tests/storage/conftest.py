"""Fixtures for storage tests.

Sessions use SQLite in-memory on a StaticPool so the test thread and the
TestClient's app thread share one database.
"""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.db.base  # noqa: F401
from app.auth.dependencies import AdminIdentity, require_admin
from app.core.exceptions import ForbiddenError, register_exception_handlers
from app.core.rate_limit import limiter
from app.core.storage import LocalFileSystem
from app.db.session import Base, get_db
from app.storage.routes.admin_cleanup import router


@pytest.fixture
def memory_engine():
    """Create an in-memory SQLite engine for isolated testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(memory_engine):
    session_factory = sessionmaker(bind=memory_engine, autocommit=False, autoflush=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def content_store():
    """Content store mock holding every key unless told otherwise."""
    store = MagicMock()
    store.find.side_effect = lambda key: [MagicMock(key=key)]
    store.delete.return_value = None
    return store


@pytest.fixture
def upload_dir(tmp_path):
    root = tmp_path / "uploads"
    root.mkdir()
    return root


@pytest.fixture
def filesystem(upload_dir):
    return LocalFileSystem(str(upload_dir))


@pytest.fixture
def admin_identity():
    return AdminIdentity(id="admin-1", email="admin@example.org", role="admin")


@pytest.fixture
def app_with_admin(db_session, admin_identity):
    """FastAPI app with the admin router and an authenticated admin."""
    app = FastAPI()
    app.state.limiter = limiter
    register_exception_handlers(app)
    app.include_router(router, prefix="/api/v1/admin")

    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[require_admin] = lambda: admin_identity

    return app


@pytest.fixture
def app_with_regular_user(db_session):
    """FastAPI app whose caller is authenticated but not an admin."""
    app = FastAPI()
    app.state.limiter = limiter
    register_exception_handlers(app)
    app.include_router(router, prefix="/api/v1/admin")

    def reject_non_admin():
        raise ForbiddenError("Administrator privileges required")

    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[require_admin] = reject_non_admin

    return app


@pytest.fixture
def admin_client(app_with_admin):
    return TestClient(app_with_admin)


@pytest.fixture
def user_client(app_with_regular_user):
    return TestClient(app_with_regular_user)
