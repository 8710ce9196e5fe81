import mongomock
import pytest
from fastapi.testclient import TestClient

import config
import database
from auth import sign_token
from main import app

TEST_SECRET = "summerchamp-test-secret-0123456789abcdef"


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", TEST_SECRET)
    return TEST_SECRET


@pytest.fixture
def store(monkeypatch):
    """In-memory MongoDB database used by every store helper."""
    db = mongomock.MongoClient().db
    monkeypatch.setattr(database, "db", db)
    return db


@pytest.fixture
def client(store):
    return TestClient(app)


@pytest.fixture
def auth_header():
    def make(email):
        return {"Authorization": f"Bearer {sign_token({'email': email})}"}

    return make


@pytest.fixture
def admin(store):
    store.users.insert_one({"email": "admin@example.com", "name": "Admin", "role": "admin"})
    return "admin@example.com"


@pytest.fixture
def instructor(store):
    store.users.insert_one(
        {"email": "coach@example.com", "name": "Coach", "role": "instructor"}
    )
    return "coach@example.com"


@pytest.fixture
def student(store):
    store.users.insert_one({"email": "student@example.com", "name": "Student"})
    return "student@example.com"
