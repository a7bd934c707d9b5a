import os
from datetime import datetime, timezone

# Settings and the module-level engine read these at import time.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eduglobal.core.security import create_access_token
from eduglobal.db.base import Base
from eduglobal.db.session import get_db
from eduglobal.main import app
from eduglobal.models import Program, University, User

FROZEN_NOW = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

STATEMENT = (
    "I want to study computer science abroad because I enjoy building software that helps people. "
    "My projects at university taught me to work in teams and to learn quickly."
)


@pytest.fixture
def engine():
    """Fresh in-memory SQLite schema per test (one shared connection)."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def now():
    return FROZEN_NOW


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="student", is_active=True):
        counter["n"] += 1
        user = User(
            name=f"User {counter['n']}",
            email=f"user{counter['n']}@example.com",
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest.fixture
def make_university(db):
    def _make(name="University of Toronto", country="Canada", is_active=True):
        university = University(name=name, country=country, city="Toronto", type="Public", is_active=is_active)
        db.add(university)
        db.commit()
        db.refresh(university)
        return university

    return _make


@pytest.fixture
def make_program(db):
    def _make(university, name="MSc Computer Science", level="Master", deadline=None, rolling=False):
        program = Program(
            university_id=university.id,
            name=name,
            level=level,
            duration="2 years",
            application_deadline=deadline,
            rolling=rolling,
        )
        db.add(program)
        db.commit()
        db.refresh(program)
        return program

    return _make
