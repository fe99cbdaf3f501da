from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.errors import Conflict
from tasktracker.models import ROLE_STUDENT, ROLE_TEACHER, User


class AccountDirectory:
    """User lookups: by id, by email, teacher roster and each teacher's students."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        q = select(User).where(User.email == email)
        res = await self.db.execute(q)
        return res.scalar_one_or_none()

    async def list_teachers(self) -> List[dict]:
        q = select(User.id, User.email).where(User.role == ROLE_TEACHER).order_by(User.id)
        res = await self.db.execute(q)
        return [{"id": row.id, "email": row.email} for row in res.all()]

    async def list_students_of(self, teacher_id: int) -> List[int]:
        q = select(User.id).where(User.role == ROLE_STUDENT, User.teacher_id == teacher_id)
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def create_user(
        self, email: str, password_hash: str, role: str, teacher_id: Optional[int]
    ) -> User:
        user = User(email=email, password_hash=password_hash, role=role, teacher_id=teacher_id)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent signup for the same email
            await self.db.rollback()
            raise Conflict("Email already in use")
        await self.db.refresh(user)
        return user
