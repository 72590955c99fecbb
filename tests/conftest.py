# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

from echo_feedback.core.security import create_access_token  # noqa: E402
from echo_feedback.db.session import Base  # noqa: E402
from echo_feedback.db.session import get_db as app_get_session  # noqa: E402
from echo_feedback.main import app as fastapi_app  # noqa: E402
from echo_feedback.models import Feedback, User  # noqa: E402
from echo_feedback.models.user import USER_STATUS_SUSPENDED  # noqa: E402
from echo_feedback.services import auth_service, feedback_service  # noqa: E402

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "secret123"

_USER_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit, so each test wipes every table afterwards.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that registers users with unique emails."""

    def _make_user(first_name: str = "Test", *, is_admin: bool = False, **changes: Any) -> User:
        n = next(_USER_COUNTER)
        user = auth_service.register_user(
            db_session,
            first_name=first_name,
            last_name="User",
            email=f"{first_name.lower()}{n}@example.com",
            password=TEST_PASSWORD,
            is_admin=is_admin,
        )
        if changes:
            for key, value in changes.items():
                setattr(user, key, value)
            db_session.commit()
            db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return an active user."""
    return make_user("Alice")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second active user."""
    return make_user("Bob")


@pytest.fixture()
def suspended_user(make_user: Callable[..., User]) -> User:
    return make_user("Sam", status=USER_STATUS_SUSPENDED)


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    return make_user("Admin", is_admin=True)


@pytest.fixture()
def admin_headers(admin_user: User) -> dict[str, str]:
    """Return authorization headers for the administrator."""
    token = create_access_token(admin_user.user_id, is_admin=True)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def user_headers(test_user: User) -> dict[str, str]:
    """Return authorization headers for a non-admin user."""
    token = create_access_token(test_user.user_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_feedback(db_session: Session) -> Callable[..., Feedback]:
    def _make_feedback(author: User, message: str = "Great product, keep it up") -> Feedback:
        return feedback_service.create_feedback(
            db_session,
            user_id=author.user_id,
            user_name=author.full_name,
            user_email=author.email,
            message=message,
        )

    return _make_feedback


@pytest.fixture()
def test_feedback(make_feedback: Callable[..., Feedback], test_user: User) -> Feedback:
    """Create a baseline feedback entry authored by ``test_user``."""
    return make_feedback(test_user)


@pytest.fixture()
def user_password() -> str:
    """Password shared by every user created through ``make_user``."""
    return TEST_PASSWORD
