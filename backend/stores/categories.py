# stores/categories.py — Task categories (names are unique by application check)
import logging
from typing import List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from errors import CategoryExists, CategoryInUse, CategoryNotFound
from models import Category, Task, utcnow, ts
from schemas import CategoryCreate, CategoryOut, CategoryUpdate

logger = logging.getLogger("taskhub.categories")


def category_to_out(c: Category) -> CategoryOut:
    return CategoryOut(id=c.id, name=c.name, created_at=ts(c.created_at))


class CategoryStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, category_id: str) -> Category:
        stmt = select(Category).where(Category.id == category_id)
        result = await self.db.execute(stmt)
        category = result.scalar_one_or_none()
        if not category:
            raise CategoryNotFound()
        return category

    async def _ensure_name_free(self, name: str, exclude_id: str = None) -> None:
        stmt = select(Category.id).where(Category.name == name)
        if exclude_id:
            stmt = stmt.where(Category.id != exclude_id)
        result = await self.db.execute(stmt)
        if result.first() is not None:
            raise CategoryExists()

    async def create_category(self, data: CategoryCreate) -> CategoryOut:
        await self._ensure_name_free(data.name)
        category = Category(name=data.name, created_at=utcnow())
        self.db.add(category)
        await self.db.commit()
        logger.info(f"Category '{data.name}' created")
        return category_to_out(category)

    async def list_categories(self) -> List[CategoryOut]:
        stmt = select(Category).order_by(Category.name.asc())
        result = await self.db.execute(stmt)
        return [category_to_out(c) for c in result.scalars().all()]

    async def get_category_by_id(self, category_id: str) -> CategoryOut:
        return category_to_out(await self._load(category_id))

    async def update_category(self, category_id: str, data: CategoryUpdate) -> CategoryOut:
        category = await self._load(category_id)
        await self._ensure_name_free(data.name, exclude_id=category.id)
        category.name = data.name
        await self.db.commit()
        return category_to_out(category)

    async def delete_category(self, category_id: str) -> None:
        category = await self._load(category_id)

        stmt = select(func.count(Task.id)).where(Task.category_id == category.id)
        result = await self.db.execute(stmt)
        if (result.scalar() or 0) > 0:
            raise CategoryInUse()

        await self.db.delete(category)
        await self.db.commit()
        logger.info(f"Category {category_id} deleted")
