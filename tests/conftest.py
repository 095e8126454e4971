"""Pytest configuration and shared fixtures for the blog CMS tests."""

import os
from datetime import timedelta
from typing import Dict, Generator

# blogcms.main construye una app por defecto al importarse
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from blogcms.core.config import Settings
from blogcms.crud import crud_user
from blogcms.db.models_registry import Base
from blogcms.main import create_app
from blogcms.models.user import User, UserRoleEnum


# =============================================================================
# Test Configuration
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """In-memory SQLite, no scheduler, console-only logging."""
    return Settings(
        SECRET_KEY="test-secret-key",
        DATABASE_URL="sqlite://",
        SCHEDULER_ENABLED=False,
        LOG_TO_FILE=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(test_settings: Settings) -> Generator[FastAPI, None, None]:
    """Fresh application and schema for every test."""
    application = create_app(test_settings)
    Base.metadata.create_all(bind=application.state.engine)
    yield application
    Base.metadata.drop_all(bind=application.state.engine)
    application.state.engine.dispose()


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app: FastAPI) -> Generator[Session, None, None]:
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# Users and tokens
# =============================================================================


def _make_user(db: Session, name: str, email: str, role: UserRoleEnum, can_publish: bool = False) -> User:
    return crud_user.create_user(
        db, name=name, email=email, password="secret123", role=role, can_publish=can_publish
    )


@pytest.fixture
def admin_user(db: Session) -> User:
    return _make_user(db, "Ada Admin", "admin@example.com", UserRoleEnum.admin, can_publish=True)


@pytest.fixture
def author_user(db: Session) -> User:
    return _make_user(db, "Alan Author", "author@example.com", UserRoleEnum.author)


@pytest.fixture
def other_author(db: Session) -> User:
    return _make_user(db, "Grace Other", "other@example.com", UserRoleEnum.author)


@pytest.fixture
def publisher_user(db: Session) -> User:
    return _make_user(db, "Paula Publisher", "publisher@example.com", UserRoleEnum.author, can_publish=True)


def bearer(app: FastAPI, user: User, expires_delta: timedelta = None) -> Dict[str, str]:
    token = app.state.token_service.create_access_token(
        user_id=user.id, email=user.email, role=UserRoleEnum(user.role).value, expires_delta=expires_delta
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(app: FastAPI, admin_user: User) -> Dict[str, str]:
    return bearer(app, admin_user)


@pytest.fixture
def author_headers(app: FastAPI, author_user: User) -> Dict[str, str]:
    return bearer(app, author_user)


@pytest.fixture
def other_headers(app: FastAPI, other_author: User) -> Dict[str, str]:
    return bearer(app, other_author)


@pytest.fixture
def publisher_headers(app: FastAPI, publisher_user: User) -> Dict[str, str]:
    return bearer(app, publisher_user)
