# routers/categories.py — Task categories (admin-managed)
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from auth import get_current_user, require_admin, CurrentUser
from database import get_db_session
from schemas import CategoryCreate, CategoryOut, CategoryUpdate, TaskOut
from stores.categories import CategoryStore
from stores.tasks import TaskStore

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=List[CategoryOut])
async def list_categories(db: AsyncSession = Depends(get_db_session)):
    return await CategoryStore(db).list_categories()


@router.get("/tasks/{category_id}", response_model=List[TaskOut])
async def list_category_tasks(
    category_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """The caller's tasks filed under a category"""
    return await TaskStore(db).get_tasks_by_category(category_id, user.id)


@router.get("/{category_id}", response_model=CategoryOut)
async def get_category(category_id: str, db: AsyncSession = Depends(get_db_session)):
    return await CategoryStore(db).get_category_by_id(category_id)


@router.post("", response_model=CategoryOut, status_code=201)
async def create_category(
    data: CategoryCreate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    return await CategoryStore(db).create_category(data)


@router.put("/{category_id}", response_model=CategoryOut)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    return await CategoryStore(db).update_category(category_id, data)


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: str,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Delete a category no task refers to"""
    await CategoryStore(db).delete_category(category_id)
    return Response(status_code=204)
