from __future__ import annotations
from typing import Optional, Protocol

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.db import get_db
from tasktracker.errors import Unauthorized
from tasktracker.models import User
from tasktracker.services.credentials import Claim, CredentialService
from tasktracker.services.directory import AccountDirectory
from tasktracker.services.policy import Principal


class UserLookup(Protocol):
    async def get(self, user_id: int) -> Optional[User]: ...


async def resolve(claim: Claim, users: UserLookup) -> User:
    """
    Load the user a verified claim points at.
    Role and teacher id are taken from the stored user, never from the token.
    """
    user = await users.get(claim.user_id)
    if user is None:
        # account removed while its token is still valid
        raise Unauthorized("Invalid token")
    return user


def get_credentials(request: Request) -> CredentialService:
    return request.app.state.credentials


def bearer_token(request: Request) -> str:
    header = request.headers.get("authorization")
    if not header:
        raise Unauthorized("No token provided")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Unauthorized")
    return token.strip()


def get_claim(
    token: str = Depends(bearer_token),
    credentials: CredentialService = Depends(get_credentials),
) -> Claim:
    # runs before any session is used, so a bad token never reaches the store
    return credentials.verify(token)


async def get_current_user(
    claim: Claim = Depends(get_claim),
    db: AsyncSession = Depends(get_db),
) -> User:
    return await resolve(claim, AccountDirectory(db))


async def get_current_principal(user: User = Depends(get_current_user)) -> Principal:
    return Principal.from_user(user)
