from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.db import get_db
from tasktracker.schemas import (
    MessageResponse, TaskCreate, TaskListResponse, TaskOut, TaskResponse, TaskUpdate
)
from tasktracker.services import policy
from tasktracker.services.directory import AccountDirectory
from tasktracker.services.identity import get_current_principal
from tasktracker.services.policy import Principal
from tasktracker.services.task_store import TaskStore

# every route here requires a bearer token
router = APIRouter(prefix="/tasks", tags=["tasks"])


# [1] role-scoped listing
@router.get("", response_model=TaskListResponse)
@router.get("/", response_model=TaskListResponse, include_in_schema=False)
async def list_tasks(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Students get their own tasks; teachers get their own plus their students'.
    Most recent first.
    """
    scope = await policy.visibility_scope(principal, AccountDirectory(db))
    tasks = await TaskStore(db).list(scope)
    return TaskListResponse(tasks=[TaskOut.model_validate(t) for t in tasks])


# [2] create, always owned by the caller
@router.post("", response_model=TaskResponse)
@router.post("/", response_model=TaskResponse, include_in_schema=False)
async def create_task(
    task_in: TaskCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    task = await TaskStore(db).create(
        owner_id=policy.owner_for_new_task(principal),
        title=task_in.title,
        description=task_in.description,
        due_date=task_in.due_date,
    )
    return TaskResponse(message="Task created", task=TaskOut.model_validate(task))


# [3] partial update, owner only
@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    patch_in: TaskUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    store = TaskStore(db)
    await policy.authorize_mutation(principal, task_id, store)

    task = await store.update(task_id, patch_in.model_dump(exclude_unset=True))
    return TaskResponse(message="Task updated", task=TaskOut.model_validate(task))


# [4] delete, owner only
@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    store = TaskStore(db)
    await policy.authorize_mutation(principal, task_id, store)

    await store.delete(task_id)
    return MessageResponse(message="Task deleted")
