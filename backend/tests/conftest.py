import pytest
from fastapi.testclient import TestClient

from tasktracker.config import Settings
from tasktracker.main import create_app

TEST_SECRET = "test-secret"
PASSWORD = "secret123"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret=TEST_SECRET,
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signup(client):
    """Sign a user up and return (token, user dict)."""

    def _signup(email: str, role: str, teacher_id=None):
        body = {"email": email, "password": PASSWORD, "role": role}
        if teacher_id is not None:
            body["teacherId"] = teacher_id
        response = client.post("/auth/signup", json=body)
        assert response.status_code == 200, response.text
        data = response.json()
        return data["token"], data["user"]

    return _signup
