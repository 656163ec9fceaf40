"""Shared test fixtures."""
import asyncio
import os
import tempfile
from datetime import datetime, time, timedelta

from cryptography.fernet import Fernet

# settings must exist before the app modules are imported
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("DB_NAME", "medibook_test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="medibook-logs-"))

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from database import get_database
from models.user import UserCreate
from scripts.seed_doctors import seed
from services.user_service import UserService
from utils.dateparse import utcnow


def run(coro):
    return asyncio.run(coro)


def next_weekday_at(hour: int, minute: int = 0, weekday: int = 0, min_days: int = 2) -> datetime:
    """A slot on the given weekday at least ``min_days`` from today."""
    day = utcnow().date() + timedelta(days=min_days)
    while day.weekday() != weekday:
        day += timedelta(days=1)
    return datetime.combine(day, time(hour, minute))


@pytest.fixture
def db():
    return AsyncMongoMockClient()["medibook_test"]


@pytest.fixture
def client(db):
    """FastAPI test client bound to an in-memory database."""
    from main import app

    app.dependency_overrides[get_database] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def doctors(db):
    """The starter catalog, in insertion order."""
    run(seed(db))
    return run(db.doctors.find().sort("_id", 1).to_list(length=None))


@pytest.fixture
def doctor_id(doctors):
    """Sarah Johnson, Cardiology, Mon-Fri 09:00-17:00, 30 minute slots."""
    return str(doctors[0]["_id"])


def _auth_headers(client, email, password):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def register(client):
    """Register a patient and return (user, headers)."""
    def _register(name="Jane Doe", email="jane@example.com", password="secret123"):
        response = client.post("/auth/register", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['access_token']}"}
    return _register


@pytest.fixture
def patient(register):
    return register()


@pytest.fixture
def admin(client, db):
    """An admin account and its auth headers."""
    user = run(UserService.create_by_admin(
        db, UserCreate(name="Clinic Admin", email="admin@example.com", password="adminpass", role="admin")
    ))
    return user, _auth_headers(client, "admin@example.com", "adminpass")
