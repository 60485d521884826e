# routers/comments.py — Comments on tasks
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from auth import get_current_user, CurrentUser
from database import get_db_session
from schemas import CommentCreate, CommentOut, CommentUpdate
from stores.comments import CommentStore

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.get("", response_model=List[CommentOut])
async def list_comments(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await CommentStore(db).list_comments(user.id)


@router.get("/byTaskId/{task_id}", response_model=List[CommentOut])
async def list_task_comments(
    task_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Comments of one of the caller's tasks, oldest first"""
    return await CommentStore(db).get_comments_by_task(task_id, user.id)


@router.get("/{comment_id}", response_model=CommentOut)
async def get_comment(
    comment_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await CommentStore(db).get_comment_by_id(comment_id, user.id)


@router.post("", response_model=CommentOut, status_code=201)
async def create_comment(
    data: CommentCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await CommentStore(db).create_comment(data, user.id)


@router.put("/{comment_id}", response_model=CommentOut)
async def update_comment(
    comment_id: str,
    data: CommentUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await CommentStore(db).update_comment(comment_id, data, user.id)


@router.delete("/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await CommentStore(db).delete_comment(comment_id, user.id)
    return Response(status_code=204)
