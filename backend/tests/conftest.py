"""
Shared fixtures: an in-memory SQLite database rebuilt for every test and a
TestClient bound to the application.
"""
import os

# Must be set before meunps.database builds its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("DATABASE_PUBLIC_URL", None)
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient

from meunps.database import Base, SessionLocal, engine
from meunps.main import app


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def register_and_login(client, email, password="secret123", name=None):
    """Create an account and return its bearer headers."""
    response = client.post("/api/auth/register", json={
        "email": email,
        "password": password,
        "name": name or email.split("@")[0].title(),
    })
    assert response.status_code == 201, response.text
    return login(client, email, password)


def login(client, email, password="secret123"):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client, "ana@example.com", name="Ana")


@pytest.fixture
def other_headers(client):
    return register_and_login(client, "bruno@example.com", name="Bruno")


@pytest.fixture
def admin_headers(client, db_session):
    from seed_admin import seed_admin

    seed_admin(db_session, "admin@meunps.com", "admin123")
    return login(client, "admin@meunps.com", "admin123")


def create_campaign(client, headers, **overrides):
    payload = {
        "name": "Pesquisa de Satisfação",
        "start_date": "2020-01-01T00:00:00Z",
    }
    payload.update(overrides)
    response = client.post("/api/campaigns", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]
