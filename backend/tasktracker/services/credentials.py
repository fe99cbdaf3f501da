from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from fastapi.concurrency import run_in_threadpool
from jose import JWTError, jwt
from passlib.context import CryptContext

from tasktracker.errors import Unauthorized

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


async def hash_password(password: str) -> str:
    if not isinstance(password, (str, bytes)):
        raise TypeError("Password must be a string or bytes.")
    return await run_in_threadpool(pwd_context.hash, password)


async def verify_password(plain_password: str, password_hash: str) -> bool:
    return await run_in_threadpool(pwd_context.verify, plain_password, password_hash)


@dataclass(frozen=True)
class Claim:
    """Decoded payload of a verified token."""
    user_id: int
    role: str
    teacher_id: Optional[int]
    issued_at: datetime
    expires_at: datetime


class CredentialService:
    """
    Issues and verifies signed identity tokens (HS256 by default).
    Stateless apart from the secret handed in at construction.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] | None = None,
    ):
        if not secret:
            raise ValueError("A signing secret is required.")
        self._secret = secret
        self._algorithm = algorithm
        self._lifetime = lifetime
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def issue(self, user_id: int, role: str, teacher_id: Optional[int]) -> str:
        now = self._clock()
        to_encode = {
            "sub": str(user_id),
            "role": role,
            "teacherId": teacher_id,
            "iat": int(now.timestamp()),
            "exp": int((now + self._lifetime).timestamp()),
        }
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    def verify(self, token: str | None) -> Claim:
        """Return the claim carried by ``token`` or raise Unauthorized. Nothing else escapes."""
        if not token:
            raise Unauthorized()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            raise Unauthorized()

        try:
            user_id = int(payload["sub"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
            teacher_id = payload.get("teacherId")
            if teacher_id is not None:
                teacher_id = int(teacher_id)
            role = str(payload["role"])
        except (KeyError, TypeError, ValueError):
            raise Unauthorized()

        # expiry is checked against our own clock so it can be driven in tests
        if self._clock() >= expires_at:
            raise Unauthorized()

        return Claim(
            user_id=user_id,
            role=role,
            teacher_id=teacher_id,
            issued_at=issued_at,
            expires_at=expires_at,
        )
