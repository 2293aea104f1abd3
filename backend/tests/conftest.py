"""Shared fixtures: in-memory database, HTTP client, a signed-in user."""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("API_SECURE", "true")
os.environ.setdefault("ENVIRONMENT", "test")

import email_validator
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from invoice_server import models  # noqa: F401 - register models
from invoice_server.api.deps import get_db
from invoice_server.db.base import Base
from invoice_server.db.session import build_session_factory, enable_sqlite_foreign_keys
from invoice_server.main import app
from invoice_server.models.client import Client
from invoice_server.models.user import User

# Fixture data uses reserved "*.test" domains; email-validator accepts them only in test mode
email_validator.TEST_ENVIRONMENT = True


@pytest.fixture
def engine():
    # One shared connection so every session sees the same in-memory database
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # Not used as a context manager: lifespan would run init_db on the real engine
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, username, email, password="secret123"):
    response = client.post(
        "/api/users/register",
        json={"username": username, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def auth_headers(client):
    body = register(client, "alice", "alice@example.com")
    return {"Authorization": f"Bearer {body['token']}"}


@pytest.fixture
def other_auth_headers(client):
    body = register(client, "bob", "bob@example.com")
    return {"Authorization": f"Bearer {body['token']}"}


@pytest.fixture
def acme(client, auth_headers):
    response = client.post(
        "/api/clients",
        json={"name": "Acme", "email": "billing@acme.test", "city": "Berlin"},
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["client"]


@pytest.fixture
def bill_from(client, auth_headers):
    response = client.post(
        "/api/bill-from-addresses",
        json={
            "companyName": "Alice Consulting",
            "address": "1 Main St",
            "city": "Berlin",
            "postalCode": "10115",
            "country": "DE",
            "email": "alice@consulting.test",
            "phone": "+49 30 1234567",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["billFromAddress"]


@pytest.fixture
def invoice_payload():
    """Builder for a valid invoice body; keyword overrides replace top-level keys."""

    def build(client_id, **overrides):
        payload = {
            "invoiceDate": "2025-01-15",
            "dueDate": "2025-02-15",
            "clientId": client_id,
            "items": [
                {"description": "Design", "quantity": 2, "unitPrice": 50, "total": 100},
                {"description": "Hosting", "quantity": 1, "unitPrice": 20, "total": 20},
            ],
            "subtotal": 120,
            "taxRate": 10,
            "taxAmount": 12,
            "total": 132,
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def owner(db):
    """A user row created directly, for service-level tests."""
    user = User(username="owner", email="owner@example.com", password_hash="not-a-real-hash")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def customer(db):
    customer = Client(name="Globex")
    db.add(customer)
    db.commit()
    return customer
