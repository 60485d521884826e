# stores/comments.py — Flat comments attached to tasks
#
# Comments follow the visibility of their task: only the task owner may read
# or change them.
import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from errors import CommentNotFound, TaskNotFound
from guards import assert_owner
from models import Comment, Task, utcnow, ts
from schemas import CommentCreate, CommentOut, CommentUpdate

logger = logging.getLogger("taskhub.comments")


def comment_to_out(c: Comment) -> CommentOut:
    return CommentOut(
        id=c.id,
        text=c.text,
        task_id=c.task_id,
        created_at=ts(c.created_at),
    )


class CommentStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _check_task(self, task_id: str, requester_id: str) -> None:
        stmt = select(Task.user_id).where(Task.id == task_id)
        result = await self.db.execute(stmt)
        owner_id = result.scalar_one_or_none()
        if owner_id is None:
            raise TaskNotFound()
        assert_owner(owner_id, requester_id)

    async def _load(self, comment_id: str, requester_id: str) -> Comment:
        stmt = select(Comment).where(Comment.id == comment_id)
        result = await self.db.execute(stmt)
        comment = result.scalar_one_or_none()
        if not comment:
            raise CommentNotFound()
        await self._check_task(comment.task_id, requester_id)
        return comment

    async def create_comment(self, data: CommentCreate, requester_id: str) -> CommentOut:
        await self._check_task(data.task_id, requester_id)

        comment = Comment(task_id=data.task_id, text=data.text, created_at=utcnow())
        self.db.add(comment)
        await self.db.commit()
        logger.info(f"Comment {comment.id} added to task {data.task_id}")
        return comment_to_out(comment)

    async def list_comments(self, requester_id: str) -> List[CommentOut]:
        """Every comment on the requester's tasks"""
        stmt = (
            select(Comment)
            .join(Task, Task.id == Comment.task_id)
            .where(Task.user_id == requester_id)
            .order_by(Comment.created_at.asc())
        )
        result = await self.db.execute(stmt)
        return [comment_to_out(c) for c in result.scalars().all()]

    async def get_comments_by_task(self, task_id: str, requester_id: str) -> List[CommentOut]:
        await self._check_task(task_id, requester_id)
        stmt = (
            select(Comment)
            .where(Comment.task_id == task_id)
            .order_by(Comment.created_at.asc())
        )
        result = await self.db.execute(stmt)
        return [comment_to_out(c) for c in result.scalars().all()]

    async def get_comment_by_id(self, comment_id: str, requester_id: str) -> CommentOut:
        return comment_to_out(await self._load(comment_id, requester_id))

    async def update_comment(self, comment_id: str, data: CommentUpdate, requester_id: str) -> CommentOut:
        comment = await self._load(comment_id, requester_id)
        comment.text = data.text
        await self.db.commit()
        return comment_to_out(comment)

    async def delete_comment(self, comment_id: str, requester_id: str) -> None:
        comment = await self._load(comment_id, requester_id)
        await self.db.delete(comment)
        await self.db.commit()
        logger.info(f"Comment {comment_id} deleted")
