"""Shared test fixtures."""

import os

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["AI_PROVIDER"] = "mock"
os.environ["PERSISTENCE_BACKEND"] = "sql"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.db.database import get_db  # noqa: E402
from src.db.models import Base  # noqa: E402
from src.main import app  # noqa: E402

TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture(autouse=True)
def _fresh_tables():
    Base.metadata.create_all(TEST_ENGINE)
    yield
    Base.metadata.drop_all(TEST_ENGINE)


@pytest.fixture()
def client() -> TestClient:
    """FastAPI TestClient (lifespan run) wired to an in-memory SQLite database."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db_session() -> Session:
    """Raw database session for direct DB assertions."""
    session = TestSession()
    try:
        yield session
    finally:
        session.close()
