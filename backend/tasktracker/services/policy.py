"""Authorization policy.

Reads are broad, writes are narrow: a teacher may list the tasks of every
student who names them as teacher, but only the owner of a task may change
or delete it. There is no role override for mutation.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Set

from tasktracker.errors import Forbidden, NotFound, ValidationError
from tasktracker.models import ROLE_STUDENT, ROLE_TEACHER, ROLES, Task, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The authenticated user making the current request."""
    id: int
    role: str
    teacher_id: Optional[int] = None

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(id=user.id, role=user.role, teacher_id=user.teacher_id)

    @property
    def is_teacher(self) -> bool:
        return self.role == ROLE_TEACHER


class StudentRoster(Protocol):
    async def list_students_of(self, teacher_id: int) -> list[int]: ...


class TaskLookup(Protocol):
    async def get(self, task_id: int) -> Optional[Task]: ...


async def visibility_scope(principal: Principal, roster: StudentRoster) -> Set[int]:
    """Owner ids whose tasks ``principal`` may list."""
    scope = {principal.id}
    if principal.is_teacher:
        scope.update(await roster.list_students_of(principal.id))
    return scope


def owner_for_new_task(principal: Principal) -> int:
    # any owner supplied by the client is ignored
    return principal.id


def ensure_owner(principal: Principal, task: Task) -> None:
    if task.owner_id != principal.id:
        logger.info(
            "denied mutation of task %s (owner %s) by user %s",
            task.id, task.owner_id, principal.id,
        )
        raise Forbidden("Not allowed")


async def authorize_mutation(principal: Principal, task_id: int, tasks: TaskLookup) -> Task:
    """Load the task for update/delete: NotFound if missing, Forbidden unless owned by principal."""
    task = await tasks.get(task_id)
    if task is None:
        raise NotFound("Task not found")
    ensure_owner(principal, task)
    return task


def signup_teacher_id(role: str, teacher_id: Optional[int]) -> Optional[int]:
    """
    Apply the signup role rule and return the teacher id to store.
    Students must name a teacher (kept verbatim, not checked for existence);
    teachers never carry one.
    """
    if role not in ROLES:
        raise ValidationError("Role must be student or teacher")
    if role == ROLE_STUDENT:
        if not teacher_id:  # 0 is never a valid id
            raise ValidationError("Students must have a teacherId")
        return teacher_id
    return None
