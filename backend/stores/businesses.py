# stores/businesses.py — Business listings with an approval workflow
# - Listings created by admins start approved, everyone else's start pending
# - Owner or admin may update or delete a listing
# - The attached image lives on disk (images.py); the row keeps its file name

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from errors import BusinessEmailExists, BusinessNotFound
from guards import assert_can_mutate, UPDATE, DELETE
from images import ImageStore, ImageUpload
from models import Business, BusinessStatus, RoleName, utcnow, ts
from schemas import BusinessCreate, BusinessOut, BusinessUpdate
from stores.users import UserStore

logger = logging.getLogger("taskhub.businesses")


def business_to_out(b: Business) -> BusinessOut:
    return BusinessOut(
        id=b.id,
        name=b.name,
        employee_count=b.employee_count,
        phone_number=b.phone_number,
        email=b.email,
        country=b.country,
        city=b.city,
        owner_full_name=b.owner_full_name,
        description=b.description,
        image=b.image,
        user_id=b.user_id,
        status=b.status,
        created_at=ts(b.created_at),
    )


class BusinessStore:
    def __init__(self, db: AsyncSession, images: Optional[ImageStore] = None):
        self.db = db
        self.images = images or ImageStore()
        self.users = UserStore(db, self.images)

    async def _load(self, business_id: str) -> Business:
        stmt = select(Business).where(Business.id == business_id)
        result = await self.db.execute(stmt)
        business = result.scalar_one_or_none()
        if not business:
            raise BusinessNotFound()
        return business

    async def _ensure_email_free(self, email: str, exclude_id: str = None) -> None:
        stmt = select(Business.id).where(Business.email == email)
        if exclude_id:
            stmt = stmt.where(Business.id != exclude_id)
        result = await self.db.execute(stmt)
        if result.first() is not None:
            raise BusinessEmailExists()

    async def _is_admin(self, user_id: str) -> bool:
        return await self.users.get_role_name(user_id) == RoleName.ADMIN.value

    async def _list(self, *criteria) -> List[BusinessOut]:
        stmt = select(Business).where(*criteria).order_by(Business.created_at.desc())
        result = await self.db.execute(stmt)
        return [business_to_out(b) for b in result.scalars().all()]

    async def create_business(
        self, data: BusinessCreate, requester_id: str, image: Optional[ImageUpload] = None,
    ) -> BusinessOut:
        await self._ensure_email_free(data.email)
        owner = await self.users.get_user_by_id(requester_id)
        if image is not None:
            self.images.validate(image)

        status = BusinessStatus.APPROVED if owner.role == RoleName.ADMIN.value else BusinessStatus.PENDING
        image_name = self.images.save(image) if image is not None else None

        business = Business(
            **data.model_dump(),
            owner_full_name=owner.name,
            image=image_name,
            user_id=owner.id,
            status=status,
            created_at=utcnow(),
        )
        self.db.add(business)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            self.images.delete(image_name)
            raise BusinessEmailExists()

        logger.info(f"Business {business.id} created by {owner.id} ({status.value})")
        return business_to_out(business)

    async def list_businesses(self, status: Optional[BusinessStatus] = None) -> List[BusinessOut]:
        if status is None:
            return await self._list()
        return await self._list(Business.status == status)

    async def get_businesses_by_status(self, status: BusinessStatus) -> List[BusinessOut]:
        return await self.list_businesses(status)

    async def get_user_businesses(self, user_id: str) -> List[BusinessOut]:
        return await self._list(Business.user_id == user_id)

    async def get_business_by_id(self, business_id: str) -> BusinessOut:
        return business_to_out(await self._load(business_id))

    async def update_business(
        self,
        business_id: str,
        requester_id: str,
        data: BusinessUpdate,
        image: Optional[ImageUpload] = None,
    ) -> BusinessOut:
        business = await self._load(business_id)
        assert_can_mutate(business.user_id, requester_id, await self._is_admin(requester_id), UPDATE, "business")

        # Absent and empty fields keep their current value
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v not in (None, "")}
        if "email" in changes and changes["email"] != business.email:
            await self._ensure_email_free(changes["email"], exclude_id=business.id)
        if image is not None:
            self.images.validate(image)

        for field, value in changes.items():
            setattr(business, field, value)

        old_image = new_image = None
        if image is not None:
            old_image = business.image
            new_image = self.images.save(image)
            business.image = new_image

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            self.images.delete(new_image)
            raise BusinessEmailExists()

        self.images.delete(old_image)
        logger.info(f"Business {business_id} updated by {requester_id}")
        return business_to_out(business)

    async def delete_business(self, business_id: str, requester_id: str) -> None:
        business = await self._load(business_id)
        assert_can_mutate(business.user_id, requester_id, await self._is_admin(requester_id), DELETE, "business")

        image_name = business.image
        await self.db.delete(business)
        await self.db.commit()
        self.images.delete(image_name)
        logger.info(f"Business {business_id} deleted by {requester_id}")

    async def change_status(self, business_id: str, status: BusinessStatus) -> BusinessOut:
        business = await self._load(business_id)
        business.status = status
        await self.db.commit()
        logger.info(f"Business {business_id} moved to {status.value}")
        return business_to_out(business)
