import os

# Cheap hashes and no outbound mail while testing; read when config is first imported.
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RESEND_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from database import Base, get_db, make_engine, seed_priorities
from main import app
from notifications import get_notifier

# Use an in-memory SQLite database for testing
engine = make_engine("sqlite://")
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeNotifier:
    def __init__(self):
        self.sent = []

    def send_password_reset(self, user_id, email, username, reset_link):
        self.sent.append({"user_id": user_id, "email": email, "username": username, "link": reset_link})
        return True


# Override the get_db dependency to use the test database
def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    # Fresh tables for every test
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        seed_priorities(db)
    finally:
        db.close()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(notifier):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, username="testuser", email="test@example.com", password="password123"):
    return client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": email, "password": password},
    )


def login_headers(client, email="test@example.com", password="password123"):
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    token = response.json()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client):
    register(client)
    return login_headers(client)


@pytest.fixture
def other_headers(client):
    register(client, username="otheruser", email="other@example.com")
    return login_headers(client, email="other@example.com")
