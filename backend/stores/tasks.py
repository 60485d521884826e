# stores/tasks.py — Task hierarchy engine
# - Tasks form trees through parent_id; only root tasks are listed
# - Reads load the subtree one level per query and attach comments and
#   category names with one IN query each
# - Inline subtasks are created from an explicit work stack, so input depth is
#   bounded by the request size only
# - Deleting a node removes its subtree and their comments through the FK cascade
# - Tasks are visible to their owner only; admins get no override here

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from errors import CategoryNotFound, ParentTaskNotFound, TaskNotFound
from guards import assert_owner
from models import Category, Comment, Task, TaskStatus, as_utc, new_uuid, utcnow, ts
from schemas import TaskCreate, TaskOut, TaskUpdate
from stores.comments import comment_to_out

logger = logging.getLogger("taskhub.tasks")


def _status_value(status) -> str:
    return status.value if isinstance(status, TaskStatus) else status


def task_to_out(
    task: Task,
    subtasks: Optional[List[TaskOut]] = None,
    comments: Optional[list] = None,
    category_name: Optional[str] = None,
) -> TaskOut:
    return TaskOut(
        id=task.id,
        title=task.title,
        description=task.description,
        status=_status_value(task.status),
        category_id=task.category_id,
        category_name=category_name,
        parent_id=task.parent_id,
        lat=task.lat,
        lng=task.lng,
        end_time=ts(task.end_time),
        user_id=task.user_id,
        created_at=ts(task.created_at),
        subtasks=subtasks or [],
        comments=comments or [],
    )


def _walk(trees: Iterable[TaskCreate]):
    """Every node of the given input trees, parents before children"""
    stack = list(trees)
    while stack:
        node = stack.pop()
        yield node
        stack.extend(node.subtasks)


class TaskStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ============================================================
    # INTERNALS
    # ============================================================

    async def _load(self, task_id: str, missing=TaskNotFound) -> Task:
        stmt = select(Task).where(Task.id == task_id)
        result = await self.db.execute(stmt)
        task = result.scalar_one_or_none()
        if not task:
            raise missing()
        return task

    async def _load_owned(self, task_id: str, requester_id: str, missing=TaskNotFound) -> Task:
        task = await self._load(task_id, missing)
        assert_owner(task.user_id, requester_id)
        return task

    async def _ensure_categories(self, category_ids: Iterable[Optional[str]]) -> None:
        wanted = {cid for cid in category_ids if cid}
        if not wanted:
            return
        stmt = select(Category.id).where(Category.id.in_(wanted))
        result = await self.db.execute(stmt)
        if set(result.scalars().all()) != wanted:
            raise CategoryNotFound()

    async def _insert_tree(self, data: TaskCreate, owner_id: str, parent_id: Optional[str]) -> str:
        """Insert a task and its inline subtasks; returns the id of the top node"""
        root_id = None
        stack = [(data, parent_id)]
        while stack:
            node, node_parent = stack.pop()
            task = Task(
                id=new_uuid(),
                title=node.title,
                description=node.description,
                status=TaskStatus(node.status),
                category_id=node.category_id or None,
                parent_id=node_parent,
                lat=node.lat,
                lng=node.lng,
                end_time=as_utc(node.end_time),
                user_id=owner_id,
                created_at=utcnow(),
            )
            self.db.add(task)
            # Parent row must exist before its children reference it
            await self.db.flush()
            if root_id is None:
                root_id = task.id
            # Reversed so siblings are inserted in the order given
            for child in reversed(node.subtasks):
                stack.append((child, task.id))
        return root_id

    async def _create(self, data: TaskCreate, owner_id: str, parent_id: Optional[str] = None) -> str:
        await self._ensure_categories(node.category_id for node in _walk([data]))
        try:
            root_id = await self._insert_tree(data, owner_id, parent_id)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return root_id

    async def _hydrate(self, roots: Sequence[Task]) -> List[TaskOut]:
        """Attach subtrees, comments and category names to the given tasks"""
        if not roots:
            return []

        children: Dict[str, List[Task]] = defaultdict(list)
        nodes: List[Task] = list(roots)
        seen = {t.id for t in roots}
        level = list(seen)
        while level:
            stmt = (
                select(Task)
                .where(Task.parent_id.in_(level))
                .order_by(Task.created_at.asc())
            )
            result = await self.db.execute(stmt)
            fresh = []
            for row in result.scalars().all():
                children[row.parent_id].append(row)
                # A root may also be a descendant of another root
                if row.id not in seen:
                    seen.add(row.id)
                    fresh.append(row)
            nodes.extend(fresh)
            level = [row.id for row in fresh]

        comments = defaultdict(list)
        stmt = (
            select(Comment)
            .where(Comment.task_id.in_([t.id for t in nodes]))
            .order_by(Comment.created_at.asc())
        )
        result = await self.db.execute(stmt)
        for c in result.scalars().all():
            comments[c.task_id].append(comment_to_out(c))

        category_names = {}
        category_ids = {t.category_id for t in nodes if t.category_id}
        if category_ids:
            stmt = select(Category.id, Category.name).where(Category.id.in_(category_ids))
            result = await self.db.execute(stmt)
            category_names = {cid: name for cid, name in result.all()}

        built: Dict[str, TaskOut] = {
            task.id: task_to_out(
                task,
                comments=comments[task.id],
                category_name=category_names.get(task.category_id),
            )
            for task in nodes
        }
        for task in nodes:
            built[task.id].subtasks.extend(built[c.id] for c in children[task.id])
        return [built[t.id] for t in roots]

    # ============================================================
    # OPERATIONS
    # ============================================================

    async def create_task(self, data: TaskCreate, owner_id: str) -> TaskOut:
        task_id = await self._create(data, owner_id)
        logger.info(f"Task {task_id} created by {owner_id}")
        return await self.get_task_by_id(task_id, owner_id)

    async def get_task_by_id(self, task_id: str, requester_id: str) -> TaskOut:
        task = await self._load_owned(task_id, requester_id)
        hydrated = await self._hydrate([task])
        return hydrated[0]

    async def get_all_tasks(self) -> List[TaskOut]:
        stmt = (
            select(Task)
            .where(Task.parent_id.is_(None))
            .order_by(Task.created_at.asc())
        )
        result = await self.db.execute(stmt)
        return await self._hydrate(result.scalars().all())

    async def get_users_tasks(self, owner_id: str) -> List[TaskOut]:
        stmt = (
            select(Task)
            .where(Task.user_id == owner_id, Task.parent_id.is_(None))
            .order_by(Task.created_at.asc())
        )
        result = await self.db.execute(stmt)
        return await self._hydrate(result.scalars().all())

    async def get_tasks_by_category(self, category_id: str, owner_id: str) -> List[TaskOut]:
        """The owner's tasks filed under one category, each with its subtree and comments"""
        stmt = select(Category.id).where(Category.id == category_id)
        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is None:
            raise CategoryNotFound()

        stmt = (
            select(Task)
            .where(Task.category_id == category_id, Task.user_id == owner_id)
            .order_by(Task.created_at.asc())
        )
        result = await self.db.execute(stmt)
        return await self._hydrate(result.scalars().all())

    async def update_task(self, task_id: str, data: TaskUpdate, requester_id: str) -> TaskOut:
        task = await self._load_owned(task_id, requester_id)

        changes = data.model_dump(exclude_unset=True, exclude={"subtasks"})
        replace_subtasks = "subtasks" in data.model_fields_set and data.subtasks is not None

        checked = [changes.get("category_id")]
        if replace_subtasks:
            checked.extend(node.category_id for node in _walk(data.subtasks))
        await self._ensure_categories(checked)

        try:
            for field, value in changes.items():
                if field == "end_time":
                    value = as_utc(value)
                elif field == "status":
                    value = TaskStatus(value)
                elif field == "category_id":
                    value = value or None
                setattr(task, field, value)

            if replace_subtasks:
                # Grandchildren and comments follow through ON DELETE CASCADE
                await self.db.execute(delete(Task).where(Task.parent_id == task.id))
                for child in data.subtasks:
                    await self._insert_tree(child, task.user_id, task.id)

            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        if changes or replace_subtasks:
            logger.info(f"Task {task_id} updated ({', '.join(sorted(changes)) or 'subtasks'})")
        return await self.get_task_by_id(task_id, requester_id)

    async def delete_task(self, task_id: str, requester_id: str) -> None:
        task = await self._load_owned(task_id, requester_id)
        try:
            await self.db.execute(delete(Comment).where(Comment.task_id == task.id))
            await self.db.execute(delete(Task).where(Task.id == task.id))
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        logger.info(f"Task {task_id} deleted by {requester_id}")

    async def add_subtask(self, parent_id: str, data: TaskCreate, requester_id: str) -> TaskOut:
        parent = await self._load_owned(parent_id, requester_id, missing=ParentTaskNotFound)
        child_id = await self._create(data, parent.user_id, parent_id=parent.id)
        logger.info(f"Subtask {child_id} added under {parent_id}")
        return await self.get_task_by_id(parent_id, requester_id)
