import copy

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Import all models to ensure their tables are created
import student_records.db.base  # noqa: F401
from student_records.db.base_class import Base

AVERY = {
    "name": {"first": "Avery", "last": "Johnson"},
    "birthDate": "2010-05-01",
    "address": {"line1": "12 Rose St", "city": "Springfield", "district": "North"},
    "contactNumber": "0123456789",
}


# Create an in-memory SQLite database for testing
@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite database for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def TestingSessionLocal(engine):
    """Create a session factory for the test database."""
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


# Override the database dependency to use our test database
@pytest.fixture
def override_get_db(TestingSessionLocal):
    """Override the database dependency to use our test database."""
    def _override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()
    return _override_get_db


@pytest.fixture
def db_session(TestingSessionLocal):
    """Create a database session for each test."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(override_get_db):
    """Create a test client for API tests."""
    from fastapi.testclient import TestClient
    from student_records.main import app
    from student_records.db import get_db

    # Override the database dependency
    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    # Clear overrides after test
    app.dependency_overrides.clear()


@pytest.fixture
def make_payload():
    """Build a valid create payload, with nested overrides merged in."""
    def _make(**overrides):
        payload = copy.deepcopy(AVERY)
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(payload.get(key), dict):
                payload[key].update(value)
            else:
                payload[key] = value
        return payload
    return _make


@pytest.fixture
def create_student(client, make_payload):
    """POST a student through the API and return the wire record."""
    def _create(**overrides):
        response = client.post("/api/students", json=make_payload(**overrides))
        assert response.status_code == 201, response.json()
        return response.json()["student"]
    return _create
