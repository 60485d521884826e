# models.py — Database models for the task management backend
# - UUID string primary keys everywhere
# - Two roles (admin, user), seeded at startup
# - Self-referencing task tree; cascade rules declared once on the foreign keys
# - Comments cascade with their task, tasks and businesses with their owner

import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, String, DateTime, Float, Integer,
    Enum as SQLEnum, ForeignKey, Text, Index,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow():
    return datetime.now(timezone.utc)


def new_uuid():
    return str(uuid.uuid4())


def as_utc(dt):
    """Naive datetimes are taken to be UTC (SQLite drops the offset)"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def ts(dt):
    if dt is None:
        return None
    return as_utc(dt).isoformat() if isinstance(dt, datetime) else str(dt)


# ============================================================
# ENUMS
# ============================================================

class RoleName(str, PyEnum):
    ADMIN = "admin"
    USER = "user"


class TaskStatus(str, PyEnum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class BusinessStatus(str, PyEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# ============================================================
# ROLES & USERS
# ============================================================

class Role(Base):
    __tablename__ = "roles"

    id = Column(String, primary_key=True, default=new_uuid)
    name = Column(String, unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    users = relationship("User", back_populates="role")


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_uuid)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role_id = Column(String, ForeignKey("roles.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    # Relationships
    role = relationship("Role", back_populates="users", lazy="joined")


# ============================================================
# CATEGORIES
# ============================================================

class Category(Base):
    """Reference table of task categories"""
    __tablename__ = "categories"

    id = Column(String, primary_key=True, default=new_uuid)
    name = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


# ============================================================
# TASKS (self-referencing tree)
# ============================================================

class Task(Base):
    """A task; subtasks point at their parent through parent_id"""
    __tablename__ = "tasks"

    id = Column(String, primary_key=True, default=new_uuid)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        SQLEnum(TaskStatus, name="taskstatus", values_callable=_enum_values),
        nullable=False,
        default=TaskStatus.TODO,
    )
    category_id = Column(String, ForeignKey("categories.id"), nullable=True, index=True)
    parent_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True, index=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        Index("idx_task_user_parent", "user_id", "parent_id"),
    )


class Comment(Base):
    """Flat comment attached to a task"""
    __tablename__ = "comments"

    id = Column(String, primary_key=True, default=new_uuid)
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)


# ============================================================
# BUSINESS LISTINGS
# ============================================================

class Business(Base):
    __tablename__ = "businesses"

    id = Column(String, primary_key=True, default=new_uuid)
    name = Column(String, nullable=False)
    employee_count = Column(Integer, nullable=False)
    phone_number = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    country = Column(String, nullable=False)
    city = Column(String, nullable=False)
    owner_full_name = Column(String, nullable=False)  # Copied from the creator at creation
    description = Column(Text, nullable=True)
    image = Column(String, nullable=True)  # Stored file name under the upload dir
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        SQLEnum(BusinessStatus, name="businessstatus", values_callable=_enum_values),
        nullable=False,
        default=BusinessStatus.PENDING,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
