# routers/tasks.py — Tasks with nested subtasks
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from auth import get_current_user, CurrentUser
from database import get_db_session
from schemas import TaskCreate, TaskOut, TaskUpdate
from stores.tasks import TaskStore

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("", response_model=List[TaskOut])
async def list_tasks(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """List every root task with its subtree"""
    return await TaskStore(db).get_all_tasks()


@router.get("/my", response_model=List[TaskOut])
async def list_my_tasks(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """List the caller's root tasks with their subtrees"""
    return await TaskStore(db).get_users_tasks(user.id)


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await TaskStore(db).get_task_by_id(task_id, user.id)


@router.post("", response_model=TaskOut, status_code=201)
async def create_task(
    data: TaskCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Create a task, including any inline subtasks"""
    return await TaskStore(db).create_task(data, user.id)


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Apply the sent fields; a subtasks list replaces the direct children"""
    return await TaskStore(db).update_task(task_id, data, user.id)


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Delete a task with its subtree and comments"""
    await TaskStore(db).delete_task(task_id, user.id)
    return Response(status_code=204)


@router.post("/{task_id}/subtasks", response_model=TaskOut, status_code=201)
async def add_subtask(
    task_id: str,
    data: TaskCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Add one child task and return the refreshed parent"""
    return await TaskStore(db).add_subtask(task_id, data, user.id)
