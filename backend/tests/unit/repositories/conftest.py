"""Fixtures for repository unit tests."""

import pytest

from app.models.user import User


@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def test_user(db):
    user = User(
        email="test@example.com",
        nick="tester",
        password_hash="hash",
        email_verified=True,
    )
    db.add(user)
    db.commit()
    return user
