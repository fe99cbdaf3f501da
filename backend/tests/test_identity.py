import asyncio
from datetime import datetime, timezone

import pytest

from tasktracker.db import get_db
from tasktracker.errors import Unauthorized
from tasktracker.models import User
from tasktracker.services.credentials import Claim, CredentialService
from tasktracker.services.identity import resolve

NOW = datetime(2026, 1, 5, tzinfo=timezone.utc)


class FakeUsers:
    def __init__(self, *users: User):
        self.users = {u.id: u for u in users}
        self.lookups: list[int] = []

    async def get(self, user_id: int):
        self.lookups.append(user_id)
        return self.users.get(user_id)


def claim_for(user_id: int, role: str = "student", teacher_id=1) -> Claim:
    return Claim(user_id=user_id, role=role, teacher_id=teacher_id, issued_at=NOW, expires_at=NOW)


def test_resolve_returns_stored_user() -> None:
    user = User(id=5, email="s@school.edu", password_hash="x", role="student", teacher_id=1)

    assert asyncio.run(resolve(claim_for(5), FakeUsers(user))) is user


def test_resolve_rejects_unknown_subject() -> None:
    users = FakeUsers()

    with pytest.raises(Unauthorized) as exc_info:
        asyncio.run(resolve(claim_for(99), users))

    assert exc_info.value.message == "Invalid token"
    assert users.lookups == [99]


def test_stored_role_wins_over_token_role() -> None:
    # the token claims teacher, the stored account says student
    user = User(id=5, email="s@school.edu", password_hash="x", role="student", teacher_id=1)

    resolved = asyncio.run(resolve(claim_for(5, role="teacher", teacher_id=None), FakeUsers(user)))

    assert resolved.role == "student"
    assert resolved.teacher_id == 1


@pytest.fixture
def db_spy(app):
    opened = []

    async def spying_get_db():
        opened.append(True)
        yield None

    app.dependency_overrides[get_db] = spying_get_db
    yield opened
    app.dependency_overrides.clear()


@pytest.mark.parametrize(
    ("headers", "message"),
    [
        ({}, "No token provided"),
        ({"Authorization": "Bearer not-a-token"}, "Unauthorized"),
        ({"Authorization": "Basic dXNlcjpwYXNz"}, "Unauthorized"),
        ({"Authorization": "Bearer"}, "Unauthorized"),
    ],
)
def test_bad_credentials_never_reach_the_store(client, db_spy, headers, message) -> None:
    response = client.get("/tasks", headers=headers)

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": message}
    assert db_spy == []


def test_expired_token_never_reaches_the_store(client, db_spy, settings) -> None:
    past = datetime(2020, 1, 1, tzinfo=timezone.utc)
    token = CredentialService(settings.jwt_secret, clock=lambda: past).issue(1, "teacher", None)

    response = client.delete("/tasks/1", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert db_spy == []


def test_tampered_token_never_reaches_the_store(client, db_spy) -> None:
    token = CredentialService("attacker-secret").issue(1, "teacher", None)

    response = client.put("/tasks/1", json={"title": "x"}, headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert db_spy == []


def test_token_for_deleted_account_is_rejected(client, app) -> None:
    token = app.state.credentials.issue(4242, "student", 1)

    response = client.get("/tasks", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"
