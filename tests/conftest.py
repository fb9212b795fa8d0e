"""
Shared pytest fixtures for the task tracker test suite.

Fixtures follow the Arrange-Act-Assert (AAA) pattern and ensure test
isolation by providing a fresh database for each test.

Key Concepts Demonstrated:
- Fixture scopes (function, session)
- Fixture dependencies
- Test data factories
- Database setup/teardown
- Running the client package against the app in-process
"""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import datetime, timezone

import pytest
from faker import Faker

# Set testing environment before importing app
os.environ["FLASK_ENV"] = "testing"

from tasktracker import create_app, db
from tasktracker.client import SessionContext, TaskApiClient, TokenStore
from tasktracker.jwt import create_token
from tasktracker.models import Task, TaskPriority, User
from tests.helpers import TEST_API_URL, FlaskTransport, auth_headers

# Initialize Faker for generating test data
fake = Faker()


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def app():
    """
    Create application instance for the test session.

    The 'session' scope means the same app instance is reused for all
    tests; the database itself is reset per test by ``db_session``.
    """
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Create a Flask test client for making HTTP requests."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Create a fresh database for each test.

    Creates all tables before the test, then rolls back anything left
    uncommitted and drops every table afterwards.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def user_factory(db_session) -> Callable[..., User]:
    """
    Factory fixture that creates and persists users.

    Usernames default to unique Faker values; the password defaults to
    ``StrongPass123!``.
    """

    def _create_user(
        username: str | None = None,
        password: str = "StrongPass123!",
    ) -> User:
        user = User(username=username or fake.unique.user_name())
        user.set_password(password)
        db_session.session.add(user)
        db_session.session.commit()
        return user

    return _create_user


@pytest.fixture
def user(user_factory) -> User:
    """The default test user, ``user_one``."""
    return user_factory(username="user_one")


@pytest.fixture
def second_user(user_factory) -> User:
    """A second user, used in tenant-isolation tests."""
    return user_factory(username="user_two")


@pytest.fixture
def token_for(app) -> Callable[[User], str]:
    """Return a function issuing a valid token for a given user."""

    def _token_for(account: User) -> str:
        return create_token(
            user_id=account.id,
            username=account.username,
            secret=app.config["JWT_SECRET_KEY"],
            expiry_days=app.config["JWT_EXPIRY_DAYS"],
        )

    return _token_for


@pytest.fixture
def api_headers(user, token_for) -> dict[str, str]:
    """Headers (Authorization + Content-Type) for ``user_one``."""
    return auth_headers(token_for(user))


@pytest.fixture
def second_user_headers(second_user, token_for) -> dict[str, str]:
    """Headers (Authorization + Content-Type) for ``user_two``."""
    return auth_headers(token_for(second_user))


@pytest.fixture
def task_factory(db_session, user) -> Callable[..., Task]:
    """
    Factory fixture for creating Task rows directly in the database.

    Tasks belong to ``user_one`` unless ``owner`` is given.

    Example:
        def test_something(task_factory):
            task = task_factory(title="My Task")
            assert task.id is not None
    """

    def _create_task(
        *,
        owner: User | None = None,
        title: str | None = None,
        description: str | None = None,
        priority: str = TaskPriority.MEDIUM.value,
        due_date: str | None = None,
        completed: bool = False,
        created_at: datetime | None = None,
    ) -> Task:
        task = Task(
            user_id=(owner or user).id,
            title=title or fake.sentence(nb_words=4),
            description=description or fake.paragraph(),
            priority=priority,
            due_date=due_date,
            completed=completed,
            created_at=created_at or datetime.now(timezone.utc),
        )
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


@pytest.fixture
def sample_task(task_factory) -> Task:
    """A single task with known values, owned by ``user_one``."""
    return task_factory(
        title="Sample Task",
        description="This is a sample task for testing",
        priority=TaskPriority.MEDIUM.value,
    )


# -----------------------------------------------------------------------------
# Client Package Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def token_store(tmp_path) -> TokenStore:
    """Token store backed by a file in the test's temporary directory."""
    return TokenStore(tmp_path / "session.json")


@pytest.fixture
def transport(client) -> FlaskTransport:
    """In-process transport from the client package to the test app."""
    return FlaskTransport(client)


@pytest.fixture
def api_client(db_session, token_store, transport) -> TaskApiClient:
    """API client bound to a fresh session context and the test app."""
    return TaskApiClient(TEST_API_URL, SessionContext(token_store), http=transport)
