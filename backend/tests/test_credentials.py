import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from tasktracker.errors import Unauthorized
from tasktracker.services.credentials import (
    CredentialService,
    hash_password,
    verify_password,
)

SECRET = "unit-test-secret"
T0 = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def service_at(now: datetime, secret: str = SECRET) -> CredentialService:
    return CredentialService(secret, clock=lambda: now)


def test_issue_and_verify_carries_identity_fields() -> None:
    service = service_at(T0)

    claim = service.verify(service.issue(42, "student", 7))

    assert claim.user_id == 42
    assert claim.role == "student"
    assert claim.teacher_id == 7
    assert claim.issued_at == T0
    assert claim.expires_at == T0 + timedelta(days=7)


def test_teacher_token_has_null_teacher_id() -> None:
    service = service_at(T0)

    claim = service.verify(service.issue(1, "teacher", None))

    assert claim.teacher_id is None


def test_token_still_valid_just_before_expiry() -> None:
    token = service_at(T0).issue(1, "teacher", None)

    claim = service_at(T0 + timedelta(days=7) - timedelta(seconds=1)).verify(token)

    assert claim.user_id == 1


def test_expired_token_is_rejected() -> None:
    token = service_at(T0).issue(1, "teacher", None)

    with pytest.raises(Unauthorized):
        service_at(T0 + timedelta(days=7, seconds=1)).verify(token)


def test_token_signed_with_another_secret_is_rejected() -> None:
    token = service_at(T0, secret="someone-else").issue(1, "teacher", None)

    with pytest.raises(Unauthorized):
        service_at(T0).verify(token)


def test_payload_swapped_from_another_token_is_rejected() -> None:
    service = service_at(T0)
    header, _, signature = service.issue(2, "student", 1).split(".")
    _, forged_payload, _ = service.issue(1, "teacher", None).split(".")

    with pytest.raises(Unauthorized):
        service.verify(f"{header}.{forged_payload}.{signature}")


@pytest.mark.parametrize("token", [None, "", "not-a-token", "a.b.c"])
def test_missing_or_malformed_token_is_rejected(token) -> None:
    with pytest.raises(Unauthorized):
        service_at(T0).verify(token)


def test_token_without_role_is_rejected() -> None:
    token = jwt.encode(
        {"sub": "1", "iat": int(T0.timestamp()), "exp": int((T0 + timedelta(days=1)).timestamp())},
        SECRET,
        algorithm="HS256",
    )

    with pytest.raises(Unauthorized):
        service_at(T0).verify(token)


def test_empty_secret_is_refused() -> None:
    with pytest.raises(ValueError):
        CredentialService("")


def test_password_hash_round_trip() -> None:
    async def scenario():
        hashed = await hash_password("secret123")

        assert hashed != "secret123"
        assert await verify_password("secret123", hashed)
        assert not await verify_password("secret124", hashed)

    asyncio.run(scenario())
