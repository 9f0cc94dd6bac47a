"""
Shared pytest fixtures for StoreSync tests.

Uses TestConfig (SQLite in-memory) so tests run without PostgreSQL.
Session-scoped app fixture creates tables and bootstrap accounts once.
Per-test db_session rolls back after each test for isolation.
Usernames made by the factories are unique per call, so tests never
depend on rows left behind by other tests.
"""
import sys
import os
import itertools

import pytest

# Add backend to Python path so imports work
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from app import create_app  # noqa: E402
from config import TestConfig  # noqa: E402
from models import db as _db  # noqa: E402
from models.user import User, Role  # noqa: E402
from services.account_service import add_client  # noqa: E402
from services.auth_service import generate_jwt  # noqa: E402

_counter = itertools.count(1)


@pytest.fixture(scope="session")
def app():
    """Create Flask app with TestConfig (SQLite in-memory) once per session."""
    app = create_app(config_class=TestConfig)
    with app.app_context():
        _db.create_all()
    yield app


@pytest.fixture(scope="function")
def client(app):
    """Flask test client for making HTTP requests."""
    return app.test_client()


@pytest.fixture(scope="function")
def db_session(app):
    """
    Per-test database session with rollback.

    Uses a savepoint (nested transaction) so each test's data is
    rolled back without affecting the session-scoped table creation.
    Compatible with Flask-SQLAlchemy 3.x.
    """
    with app.app_context():
        _db.session.begin_nested()

        yield _db.session

        _db.session.rollback()


@pytest.fixture()
def unique_name():
    """Return a fresh username each call: unique_name("shop") -> "shop-7"."""
    def _unique_name(prefix="client"):
        return f"{prefix}-{next(_counter)}"
    return _unique_name


@pytest.fixture()
def make_client(db_session, unique_name):
    """Factory fixture to create a CLIENT account in the test database."""
    def _make_client(username=None, password="secret-pass", config=None):
        user = add_client(username or unique_name(), password)
        if config is not None:
            user.config = config
            db_session.commit()
        return user
    return _make_client


@pytest.fixture()
def admin_user(db_session):
    """The bootstrapped admin account."""
    return User.query.filter_by(role=Role.ADMIN).one()


@pytest.fixture()
def auth_headers(make_client, admin_user):
    """
    Return Authorization headers with a valid JWT.

    Usage: headers = auth_headers()            # new client
           headers = auth_headers(role="ADMIN") # bootstrapped admin
           headers = auth_headers(user=some_user)
    """
    def _auth_headers(role="CLIENT", user=None, config=None):
        if user is None:
            user = admin_user if role == "ADMIN" else make_client(config=config)
        token = generate_jwt(user)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers

