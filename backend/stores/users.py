# stores/users.py — User accounts: registration, admin management, passwords
import logging
from typing import List, Optional, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth import AuthService, CurrentUser
from errors import EmailInUse, InvalidPassword, UserNotFound
from guards import assert_can_mutate, UPDATE, DELETE
from images import ImageStore
from models import Business, Role, User, utcnow, ts
from schemas import ChangePassword, UserOut, UserRegister, UserUpdate

logger = logging.getLogger("taskhub.users")


def user_to_out(u: User) -> UserOut:
    return UserOut(
        id=u.id,
        name=u.name,
        email=u.email,
        role=u.role.name,
        created_at=ts(u.created_at),
    )


class UserStore:
    def __init__(self, db: AsyncSession, images: Optional[ImageStore] = None):
        self.db = db
        self.images = images or ImageStore()

    async def _load(self, user_id: str) -> User:
        stmt = select(User).where(User.id == user_id)
        result = await self.db.execute(stmt)
        user = result.scalar_one_or_none()
        if not user:
            raise UserNotFound()
        return user

    async def _ensure_email_free(self, email: str, exclude_id: str = None) -> None:
        stmt = select(User.id).where(User.email == email)
        if exclude_id:
            stmt = stmt.where(User.id != exclude_id)
        result = await self.db.execute(stmt)
        if result.first() is not None:
            raise EmailInUse()

    async def _role(self, role_name: str) -> Role:
        stmt = select(Role).where(Role.name == role_name)
        result = await self.db.execute(stmt)
        role = result.scalar_one_or_none()
        if not role:
            # Roles are seeded at startup; a missing one is a deployment fault
            raise RuntimeError(f"Role '{role_name}' is not seeded")
        return role

    async def create_user(self, data: UserRegister, role_name: str) -> UserOut:
        await self._ensure_email_free(data.email)
        role = await self._role(role_name)

        user = User(
            name=data.name,
            email=data.email,
            password_hash=AuthService.hash_password(data.password),
            role=role,
            created_at=utcnow(),
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise EmailInUse()

        logger.info(f"User {user.id} registered with role {role_name}")
        return user_to_out(user)

    async def get_user_by_id(self, user_id: str) -> UserOut:
        return user_to_out(await self._load(user_id))

    async def get_role_name(self, user_id: str) -> str:
        stmt = select(Role.name).join(User, User.role_id == Role.id).where(User.id == user_id)
        result = await self.db.execute(stmt)
        name = result.scalar_one_or_none()
        if name is None:
            raise UserNotFound()
        return name

    async def list_users(self, search: str = "", page: int = 1, limit: int = 10) -> Tuple[List[UserOut], int]:
        stmt = select(User)
        count_stmt = select(func.count(User.id))
        if search:
            pattern = f"%{search}%"
            match = or_(User.name.ilike(pattern), User.email.ilike(pattern))
            stmt = stmt.where(match)
            count_stmt = count_stmt.where(match)

        result = await self.db.execute(count_stmt)
        total = result.scalar() or 0

        stmt = stmt.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit)
        result = await self.db.execute(stmt)
        return [user_to_out(u) for u in result.scalars().all()], total

    async def update_user(self, user_id: str, requester: CurrentUser, data: UserUpdate) -> UserOut:
        user = await self._load(user_id)
        assert_can_mutate(user.id, requester.id, requester.is_admin, UPDATE, "user")

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes:
            await self._ensure_email_free(changes["email"], exclude_id=user.id)
        for field, value in changes.items():
            setattr(user, field, value)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise EmailInUse()
        return user_to_out(user)

    async def delete_user(self, user_id: str, requester: CurrentUser) -> None:
        user = await self._load(user_id)
        assert_can_mutate(user.id, requester.id, requester.is_admin, DELETE, "user")

        stmt = select(Business.image).where(Business.user_id == user.id, Business.image.is_not(None))
        result = await self.db.execute(stmt)
        images = result.scalars().all()

        # Tasks, comments and businesses follow through ON DELETE CASCADE
        await self.db.delete(user)
        await self.db.commit()
        for name in images:
            self.images.delete(name)
        logger.info(f"User {user_id} deleted by {requester.id}")

    async def change_password(self, user_id: str, data: ChangePassword) -> None:
        user = await self._load(user_id)
        if not AuthService.verify_password(data.old_password, user.password_hash):
            raise InvalidPassword()
        user.password_hash = AuthService.hash_password(data.new_password)
        await self.db.commit()
        logger.info(f"Password changed for user {user_id}")
