"""
Shared pytest fixtures.

Uses a file-backed SQLite database so no Postgres is required for tests.
Each test gets its own user id, so rows from other tests never leak into
per-user queries.
"""
import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_hebit.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.db.base import Base, get_db
from app.main import app

SQLITE_URL = "sqlite:///./test_hebit.db"

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def session_factory():
    """For tests that need a second, independent connection."""
    return TestingSessionLocal


@pytest.fixture()
def user_id():
    return f"user-{uuid.uuid4().hex[:12]}"


@pytest.fixture()
def client(db, user_id):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, headers={"X-User-Id": user_id}) as c:
        yield c
    app.dependency_overrides.clear()
