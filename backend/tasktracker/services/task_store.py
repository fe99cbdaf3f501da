from __future__ import annotations
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy import delete as sa_delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from tasktracker.errors import NotFound
from tasktracker.models import Task

UPDATABLE_FIELDS = ("title", "description", "due_date", "progress")


class TaskStore:
    """
    CRUD over task rows. Callers pass in a visibility scope or an owner id
    already decided by the authorization policy; nothing here checks roles.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, task_id: int) -> Optional[Task]:
        q = (
            select(Task)
            .options(joinedload(Task.owner))
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        return (await self.db.execute(q)).scalar_one_or_none()

    async def get(self, task_id: int) -> Optional[Task]:
        return await self._load(task_id)

    async def list(self, scope_owner_ids: Iterable[int]) -> List[Task]:
        owner_ids = list(scope_owner_ids)
        if not owner_ids:
            return []
        q = (
            select(Task)
            .options(joinedload(Task.owner))
            .where(Task.owner_id.in_(owner_ids))
            .order_by(desc(Task.created_at), desc(Task.id))
        )
        return list((await self.db.execute(q)).scalars().all())

    async def create(
        self,
        owner_id: int,
        title: str,
        description: Optional[str] = None,
        due_date: Optional[date] = None,
    ) -> Task:
        task = Task(owner_id=owner_id, title=title, description=description, due_date=due_date)
        self.db.add(task)
        await self.db.commit()
        return await self._load(task.id)

    async def update(self, task_id: int, patch: Mapping[str, Any]) -> Task:
        """Apply only the keys present in ``patch``; the rest keep their values."""
        task = await self.db.get(Task, task_id)
        if task is None:
            raise NotFound("Task not found")

        for field in UPDATABLE_FIELDS:
            if field in patch:
                setattr(task, field, patch[field])

        await self.db.commit()
        return await self._load(task_id)

    async def delete(self, task_id: int) -> None:
        res = await self.db.execute(sa_delete(Task).where(Task.id == task_id))
        if res.rowcount == 0:
            await self.db.rollback()
            raise NotFound("Task not found")
        await self.db.commit()
